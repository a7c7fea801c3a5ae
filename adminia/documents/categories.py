from dataclasses import dataclass


@dataclass(frozen=True)
class Category:
    """Static reference data describing one document category."""

    name: str
    icon: str
    color: str
    description: str


DEFAULT_CATEGORY = "other"

CATEGORIES: tuple[Category, ...] = (
    Category("invoices", "fas fa-file-invoice", "blue", "invoices and bills"),
    Category("contracts", "fas fa-file-contract", "green", "contracts and agreements"),
    Category("medical", "fas fa-file-medical", "purple", "medical documents"),
    Category("legal", "fas fa-gavel", "red", "legal documents"),
    Category("correspondence", "fas fa-envelope", "yellow", "letters and emails"),
    Category("financial", "fas fa-chart-line", "indigo", "bank statements, financial reports"),
    Category("administrative", "fas fa-building", "gray", "official documents"),
    Category(DEFAULT_CATEGORY, "fas fa-file-alt", "orange", "other documents"),
)

CATEGORY_NAMES: tuple[str, ...] = tuple(c.name for c in CATEGORIES)

# Labels emitted by older prompts of the French-language product.
_LEGACY_ALIASES = {
    "factures": "invoices",
    "contrats": "contracts",
}


def coerce_category(raw: object) -> str:
    """Map a model-provided label onto the closed enumeration."""
    if not isinstance(raw, str):
        return DEFAULT_CATEGORY
    name = raw.strip().lower()
    name = _LEGACY_ALIASES.get(name, name)
    return name if name in CATEGORY_NAMES else DEFAULT_CATEGORY


def describe_categories() -> str:
    """Render the enumeration as a bulleted list for prompts."""
    return "\n".join(f"- {c.name} ({c.description})" for c in CATEGORIES)
