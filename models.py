"""Shared typed models for the conference search pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

# Fields the extraction model must fill with a (possibly empty) string.
RECORD_TEXT_FIELDS: tuple[str, ...] = (
    "link",
    "name",
    "type",
    "scope",
    "deadline",
    "term",
    "conference_start_date",
    "conference_end_date",
    "icon",
    "conference_organizer",
    "institution",
    "text",
    "date",
    "read_status",
)

_FIELD_DESCRIPTIONS: dict[str, str] = {
    "link": "Official website URL of the conference",
    "name": "Official name of the conference or event",
    "type": "Event type (e.g. international conference, domestic meeting, workshop, symposium)",
    "scope": "Who may participate (e.g. anyone, graduate students only, members only)",
    "deadline": "Submission or registration deadline (YYYY-MM-DD, empty if unknown)",
    "term": "Human-readable duration of the event (e.g. 3 days)",
    "conference_start_date": "First day of the event (YYYY-MM-DD, empty if unknown)",
    "conference_end_date": "Last day of the event (YYYY-MM-DD, empty if unknown)",
    "icon": "Icon or logo image URL, empty if not found",
    "conference_organizer": "Name of the organizer",
    "institution": "Organizing institution",
    "text": "Short overview of the conference (about 200 characters)",
    "date": "Capture timestamp (ISO 8601)",
    "read_status": "Reserved, always an empty string",
    "labels": "Reserved, always an empty array",
    "tags": "Reserved, always an empty array",
}


@dataclass(frozen=True, slots=True)
class Record:
    """One extracted conference listing; ``link`` is its identity key."""

    link: str
    name: str
    type: str
    scope: str
    deadline: str
    term: str
    conference_start_date: str
    conference_end_date: str
    icon: str
    conference_organizer: str
    institution: str
    text: str
    date: str
    read_status: str = ""
    labels: tuple[str, ...] = field(default_factory=tuple)
    tags: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Any) -> Record:
        """Build a Record from LLM output, refusing partially populated objects."""
        if not isinstance(data, dict):
            raise ValueError("Expected a JSON object for a conference record")

        values: dict[str, Any] = {}
        for name in RECORD_TEXT_FIELDS:
            value = data.get(name)
            if not isinstance(value, str):
                raise ValueError(f"Conference record field {name!r} is missing or not a string")
            values[name] = value.strip()

        if not values["name"]:
            raise ValueError("Conference record has an empty name")

        for name in ("labels", "tags"):
            raw = data.get(name, [])
            if not isinstance(raw, list) or not all(isinstance(item, str) for item in raw):
                raise ValueError(f"Conference record field {name!r} must be a list of strings")
            values[name] = tuple(raw)

        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["labels"] = list(self.labels)
        data["tags"] = list(self.tags)
        return data


@dataclass(frozen=True, slots=True)
class QueryPlan:
    """A generated search query and the research goal that biases extraction."""

    query: str
    goal: str

    @classmethod
    def from_dict(cls, data: Any) -> QueryPlan | None:
        """Return a plan, or None when the query or goal is blank."""
        if not isinstance(data, dict):
            return None
        query = data.get("query")
        goal = data.get("goal")
        if not isinstance(query, str) or not isinstance(goal, str):
            return None
        if not query.strip() or not goal.strip():
            return None
        return cls(query=query.strip(), goal=goal.strip())


@dataclass(frozen=True, slots=True)
class SearchDocument:
    """One search hit with its page content rendered as markdown."""

    url: str
    title: str
    content: str


def record_json_schema() -> dict[str, Any]:
    """Strict JSON schema for a single conference record."""
    properties: dict[str, Any] = {
        name: {"type": "string", "description": _FIELD_DESCRIPTIONS[name]}
        for name in RECORD_TEXT_FIELDS
    }
    properties["read_status"]["enum"] = [""]
    for name in ("labels", "tags"):
        properties[name] = {
            "type": "array",
            "items": {"type": "string"},
            "description": _FIELD_DESCRIPTIONS[name],
        }

    return {
        "type": "object",
        "properties": properties,
        "required": [*RECORD_TEXT_FIELDS, "labels", "tags"],
        "additionalProperties": False,
    }
