"""Cell text transforms for preparing WooCommerce import sheets."""

# Stay lowercase unless first or last in the title
SMALL_WORDS = {
    "a", "an", "and", "as", "at", "but", "by", "for", "in",
    "of", "on", "or", "the", "to", "up", "via", "with",
}

ACRONYMS = {"USA", "US"}


def title_case(text: str) -> str:
    words = text.lower().split(" ")
    last = len(words) - 1
    out = []
    for i, word in enumerate(words):
        upper = word.upper()
        if upper in ACRONYMS:
            out.append(upper)
        elif i in (0, last) or word not in SMALL_WORDS:
            out.append(word[:1].upper() + word[1:])
        else:
            out.append(word)
    return " ".join(out)


def commas_to_pipes(value):
    """Swap commas for the ' |' attribute separator the All in One importer expects."""
    if isinstance(value, str) and value != "":
        return value.replace(",", " |")
    return value


def title_case_grid(grid):
    return [[title_case(v) if isinstance(v, str) else v for v in row] for row in grid]


def pipes_grid(grid):
    return [[commas_to_pipes(v) for v in row] for row in grid]
