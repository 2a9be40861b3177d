from typing import Iterable, List, Literal, Optional, Sequence

from storehub.db.models import Product


def filter_products(
    products: Iterable[Product], search_text: str, category: str
) -> List[Product]:
    """
    Products whose name contains search_text (case-insensitive) and whose
    category matches. "all" matches every category. Order is preserved and
    the input is never mutated; an empty list is a valid result.
    """
    needle = (search_text or "").lower()
    return [
        p
        for p in products
        if needle in p.name.lower() and (category == "all" or p.category == category)
    ]


def format_price(value: Optional[float]) -> str:
    if value is None:
        return "-"
    return f"${value:,.2f}"


def generate_markdown_table(
    headers: Optional[Sequence[str]],
    rows: List[List[object]],
    aligns: Optional[List[Literal["l", "c", "r"]]] = None,
) -> str:
    """
    Generate a Markdown table.

    Args:
        headers: Column headers, or None to use the first row as headers.
        rows: Rows of cells; cells are converted with str().
        aligns: 'l', 'c' or 'r' per column. Defaults to all left.

    Returns:
        str: Markdown table, or "" when there are no rows.
    """
    if not rows:
        return ""

    if not headers:
        headers, rows = rows[0], rows[1:]

    headers = [str(h) for h in headers]
    # pipes inside cells would break the table
    rows = [[str(cell).replace("|", "\\|") for cell in row] for row in rows]

    if aligns is None:
        aligns = ["l"] * len(headers)
    elif len(aligns) != len(headers):
        raise ValueError("Length of aligns must match number of headers.")

    align_map = {"l": ":---", "c": ":---:", "r": "---:"}

    lines = [
        "| " + " | ".join(headers) + " |",
        "| " + " | ".join(align_map[a] for a in aligns) + " |",
    ]
    lines.extend("| " + " | ".join(row) + " |" for row in rows)
    return "\n".join(lines)
