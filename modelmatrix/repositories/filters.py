# modelmatrix/repositories/filters.py
from sqlalchemy import and_, true
from sqlalchemy.sql.elements import ColumnElement

from modelmatrix.models.model import AIModel

LIKE_ESCAPE = "\\"


def split_csv(value: str | None) -> list[str]:
    """
    Split a comma-separated query value.

    "TensorFlow, ONNX,," -> ["TensorFlow", "ONNX"]
    """
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def _escape_like(term: str) -> str:
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def build_model_filter(
    search: str | None = None,
    framework: str | None = None,
) -> ColumnElement[bool]:
    """
    Translate listing query params into one predicate on AIModel.

      - search:    case-insensitive substring match on name
      - framework: comma-separated values, exact (case-sensitive) membership

    Absent or blank params add no constraint; with none at all the
    predicate matches every row.
    """
    clauses: list[ColumnElement[bool]] = []

    term = (search or "").strip()
    if term:
        clauses.append(
            AIModel.name.ilike(f"%{_escape_like(term)}%", escape=LIKE_ESCAPE)
        )

    frameworks = split_csv(framework)
    if frameworks:
        clauses.append(AIModel.framework.in_(frameworks))

    if not clauses:
        return true()
    return and_(*clauses)
