"""Synthetic resolution corpus generation."""

from __future__ import annotations

import random
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import TypeVar

import pandas as pd

from .schemas.documents import ResolutionDocument

LEGISLATURES = {
    "EP7": (2009, 2014),
    "EP8": (2014, 2019),
    "EP9": (2019, 2024),
}

SUBJECTS = [
    "human rights in Xinjiang",
    "the situation in Hong Kong",
    "trade and investment relations",
    "climate cooperation",
    "the detention of journalists",
    "cross-strait relations with Taiwan",
    "forced labour in supply chains",
    "academic and research cooperation",
]

STANCES = {
    "critical": {
        "score": -2.0,
        "sentences": [
            "Parliament strongly condemns the systematic repression and arbitrary detention of {group}.",
            "The resolution deplores the crackdown and calls for targeted sanctions against responsible officials.",
            "Members denounce the violations of fundamental freedoms and demand the immediate release of {group}.",
            "The authorities are urged to end the persecution, surveillance and intimidation of {group}.",
        ],
    },
    "cooperative": {
        "score": 2.0,
        "sentences": [
            "Parliament welcomes the constructive dialogue and supports deeper cooperation on {subject}.",
            "The resolution encourages mutual trust, partnership and shared investment in {subject}.",
            "Members commend the progress achieved and support a balanced strategic partnership.",
            "Both sides are invited to strengthen exchanges and joint research on {subject}.",
        ],
    },
    "mixed": {
        "score": 0.0,
        "sentences": [
            "Parliament acknowledges progress on {subject} but remains concerned about {group}.",
            "The resolution supports engagement while calling for transparency and respect for {group}.",
            "Members note the importance of trade yet stress that dialogue must address rights concerns.",
            "Cooperation on {subject} should continue, although reciprocity remains insufficient.",
        ],
    },
}

GROUPS = [
    "human rights defenders",
    "Uyghur communities",
    "pro-democracy activists",
    "independent journalists",
    "religious minorities",
]

OPENERS = [
    "The European Parliament, having regard to its previous resolutions on China,",
    "The European Parliament, having regard to the EU-China strategic agenda,",
    "The European Parliament, having regard to the statements of the Vice-President/High Representative,",
]

CLOSINGS = [
    "Instructs its President to forward this resolution to the Council and the Commission.",
    "Calls on the Member States to coordinate their position ahead of the next summit.",
]

T = TypeVar("T")


def _pick(rng: random.Random, items: Sequence[T]) -> T:
    return rng.choice(items)


def _generate_text(rng: random.Random, stance_key: str, subject: str) -> str:
    templates = STANCES[stance_key]["sentences"]
    body = [
        template.format(subject=subject, group=_pick(rng, GROUPS))
        for template in rng.sample(templates, k=3)
    ]
    return " ".join([_pick(rng, OPENERS), *body, _pick(rng, CLOSINGS)])


def _doc_records(count: int, seed: int) -> Iterator[dict[str, object]]:
    rng = random.Random(seed)
    legislatures = list(LEGISLATURES)

    for idx in range(1, count + 1):
        legislature = _pick(rng, legislatures)
        first_year, last_year = LEGISLATURES[legislature]
        year = rng.randint(first_year, last_year)
        stance_key = _pick(rng, list(STANCES))
        subject = _pick(rng, SUBJECTS)
        doc = ResolutionDocument(
            doc_id=f"P{legislature[-1]}_TA({year}){idx:04d}",
            text=_generate_text(rng, stance_key, subject),
            legislature=legislature,
            title=f"Resolution on {subject}",
            reference_score=float(STANCES[stance_key]["score"]),
        )
        yield {
            "resolution_code": doc.doc_id,
            "legislature": doc.legislature,
            "year": year,
            "title": doc.title,
            "text": doc.text,
            "stance": stance_key,
            "reference_score": doc.reference_score,
        }


def generate_corpus(output_path: Path, count: int, seed: int = 13) -> Path:
    """Write ``count`` deterministic synthetic resolutions to a CSV file."""
    if count < 0:
        raise ValueError("count must be non-negative")

    frame = pd.DataFrame(
        list(_doc_records(count=count, seed=seed)),
        columns=["resolution_code", "legislature", "year", "title", "text", "stance", "reference_score"],
    )
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(output_path, index=False)
    return output_path
