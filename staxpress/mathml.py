"""Convert MathML fragments to LaTeX source."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable

from bs4 import BeautifulSoup, Tag

from .exceptions import MathConversionError

GREEK = {
    "α": "\\alpha", "β": "\\beta", "γ": "\\gamma", "δ": "\\delta",
    "ε": "\\varepsilon", "ϵ": "\\epsilon", "ζ": "\\zeta", "η": "\\eta",
    "θ": "\\theta", "ϑ": "\\vartheta", "ι": "\\iota", "κ": "\\kappa",
    "λ": "\\lambda", "μ": "\\mu", "ν": "\\nu", "ξ": "\\xi", "π": "\\pi",
    "ρ": "\\rho", "σ": "\\sigma", "ς": "\\varsigma", "τ": "\\tau",
    "υ": "\\upsilon", "φ": "\\phi", "ϕ": "\\phi", "χ": "\\chi",
    "ψ": "\\psi", "ω": "\\omega", "Γ": "\\Gamma", "Δ": "\\Delta",
    "Θ": "\\Theta", "Λ": "\\Lambda", "Ξ": "\\Xi", "Π": "\\Pi",
    "Σ": "\\Sigma", "Υ": "\\Upsilon", "Φ": "\\Phi", "Ψ": "\\Psi",
    "Ω": "\\Omega",
}

OPERATORS = {
    "×": "\\times", "·": "\\cdot", "⋅": "\\cdot", "−": "-", "–": "-",
    "±": "\\pm", "∓": "\\mp", "÷": "\\div", "≤": "\\leq", "≥": "\\geq",
    "≠": "\\neq", "≈": "\\approx", "≅": "\\cong", "∝": "\\propto",
    "∞": "\\infty", "→": "\\rightarrow", "←": "\\leftarrow",
    "⇒": "\\Rightarrow", "⇔": "\\Leftrightarrow", "↔": "\\leftrightarrow",
    "⇌": "\\rightleftharpoons", "∑": "\\sum", "∏": "\\prod",
    "∫": "\\int", "∬": "\\iint", "∮": "\\oint", "∂": "\\partial",
    "∇": "\\nabla", "°": "{}^{\\circ}", "′": "'", "″": "''",
    "…": "\\ldots", "⋯": "\\cdots", "∈": "\\in", "∉": "\\notin",
    "⊂": "\\subset", "⊆": "\\subseteq", "∪": "\\cup", "∩": "\\cap",
    "∀": "\\forall", "∃": "\\exists", "≡": "\\equiv",
    "∼": "\\sim",
    "≪": "\\ll", "≫": "\\gg", "⊥": "\\perp", "∥": "\\parallel",
    "∠": "\\angle", "ℏ": "\\hbar", "〈": "\\langle", "〉": "\\rangle",
    "⟨": "\\langle", "⟩": "\\rangle", "|": "|", "‖": "\\|",
    "{": "\\{", "}": "\\}", "%": "\\%", "&": "\\&", "#": "\\#",
    "$": "\\$", "_": "\\_",
    # Invisible function application, times and separator.
    "\u2061": "", "\u2062": "", "\u2063": "", "\u00a0": " ",
}

SYMBOLS = {**GREEK, **OPERATORS}

FUNCTIONS = {
    "sin", "cos", "tan", "cot", "sec", "csc", "sinh", "cosh", "tanh",
    "arcsin", "arccos", "arctan", "log", "ln", "lg", "exp", "lim", "max",
    "min", "det", "sup", "inf", "gcd", "deg",
}

OVER_ACCENTS = {
    "^": "\\hat", "ˆ": "\\hat", "¯": "\\overline", "‾": "\\overline",
    "→": "\\vec", "⃗": "\\vec", "˙": "\\dot", "¨": "\\ddot",
    "~": "\\tilde", "˜": "\\tilde", "⏞": "\\overbrace",
}

UNDER_ACCENTS = {
    "_": "\\underline", "‾": "\\underline", "¯": "\\underline",
    "⏟": "\\underbrace",
}

BIG_OPERATORS = {
    "\\sum", "\\prod", "\\int", "\\iint", "\\oint", "\\lim", "\\max",
    "\\min", "\\sup", "\\inf", "\\bigcup", "\\bigcap",
}

SCRIPTED = {"msub", "msup", "msubsup", "munder", "mover", "munderover"}

TEXT_ESCAPES = str.maketrans({
    "\\": "\\textbackslash{}", "{": "\\{", "}": "\\}", "#": "\\#",
    "$": "\\$", "%": "\\%", "&": "\\&", "_": "\\_",
    "^": "\\textasciicircum{}", "~": "\\textasciitilde{}",
})

_TRAILING_COMMAND = re.compile(r"\\[A-Za-z]+$")


def _elements(tag: Tag) -> list[Tag]:
    """Return the element children of ``tag``."""

    return [child for child in tag.children if isinstance(child, Tag)]


def _join(parts: Iterable[str]) -> str:
    """Concatenate LaTeX pieces, separating commands from following letters."""

    out = ""
    for part in parts:
        if not part:
            continue
        if _TRAILING_COMMAND.search(out) and part[0].isalpha():
            out += " "
        out += part
    return out


def _symbols(text: str) -> str:
    """Map every character of ``text`` to its LaTeX spelling."""

    return _join(SYMBOLS.get(ch, ch) for ch in text)


def _expect(tag: Tag, count: int) -> list[Tag]:
    """Return exactly ``count`` element children or raise."""

    children = _elements(tag)
    if len(children) != count:
        raise MathConversionError(
            f"<{tag.name}> expects {count} children, got {len(children)}"
        )
    return children


def _group(tag: Tag) -> str:
    """Convert a script base, bracing it when it is not a single atom."""

    latex = _convert(tag)
    # A scripted base would otherwise yield ``x^{2}^{3}``.
    if tag.name in SCRIPTED or (
        tag.name == "mrow" and len(_elements(tag)) > 1
    ):
        return f"{{{latex}}}"
    return latex


def _mi(tag: Tag) -> str:
    text = tag.get_text(strip=True)
    if text in FUNCTIONS:
        return f"\\{text}"
    variant = tag.get("mathvariant")
    if variant == "bold":
        return f"\\mathbf{{{_symbols(text)}}}"
    if variant == "normal" and len(text) == 1 and text.isalpha():
        return f"\\mathrm{{{text}}}"
    return _symbols(text)


def _mn(tag: Tag) -> str:
    return _symbols(tag.get_text(strip=True))


def _mo(tag: Tag) -> str:
    text = tag.get_text(strip=True)
    if text in FUNCTIONS:
        return f"\\{text}"
    return _symbols(text)


def _mtext(tag: Tag) -> str:
    text = tag.get_text()
    if not text.strip():
        return "\\;"
    return f"\\text{{{text.translate(TEXT_ESCAPES)}}}"


def _ms(tag: Tag) -> str:
    return f"\\text{{\"{tag.get_text().translate(TEXT_ESCAPES)}\"}}"


def _mspace(tag: Tag) -> str:
    return "\\,"


def _row(tag: Tag) -> str:
    return _join(_convert(child) for child in _elements(tag))


def _semantics(tag: Tag) -> str:
    # Only the presentation branch is rendered; annotations follow it.
    children = _elements(tag)
    return _convert(children[0]) if children else ""


def _nothing(tag: Tag) -> str:
    return ""


def _mphantom(tag: Tag) -> str:
    return f"\\phantom{{{_row(tag)}}}"


def _mfrac(tag: Tag) -> str:
    num, den = _expect(tag, 2)
    if tag.get("linethickness") in {"0", "0px", "0em"}:
        return f"\\binom{{{_convert(num)}}}{{{_convert(den)}}}"
    return f"\\frac{{{_convert(num)}}}{{{_convert(den)}}}"


def _msqrt(tag: Tag) -> str:
    return f"\\sqrt{{{_row(tag)}}}"


def _mroot(tag: Tag) -> str:
    base, index = _expect(tag, 2)
    return f"\\sqrt[{_convert(index)}]{{{_convert(base)}}}"


def _msub(tag: Tag) -> str:
    base, sub = _expect(tag, 2)
    return f"{_group(base)}_{{{_convert(sub)}}}"


def _msup(tag: Tag) -> str:
    base, sup = _expect(tag, 2)
    return f"{_group(base)}^{{{_convert(sup)}}}"


def _msubsup(tag: Tag) -> str:
    base, sub, sup = _expect(tag, 3)
    return f"{_group(base)}_{{{_convert(sub)}}}^{{{_convert(sup)}}}"


def _is_big_operator(latex: str) -> bool:
    return latex in BIG_OPERATORS


def _mover(tag: Tag) -> str:
    base, over = _expect(tag, 2)
    base_latex = _convert(base)
    accent = OVER_ACCENTS.get(over.get_text(strip=True))
    if over.name == "mo" and accent:
        return f"{accent}{{{base_latex}}}"
    if _is_big_operator(base_latex):
        return f"{base_latex}^{{{_convert(over)}}}"
    return f"\\overset{{{_convert(over)}}}{{{base_latex}}}"


def _munder(tag: Tag) -> str:
    base, under = _expect(tag, 2)
    base_latex = _convert(base)
    accent = UNDER_ACCENTS.get(under.get_text(strip=True))
    if under.name == "mo" and accent:
        return f"{accent}{{{base_latex}}}"
    if _is_big_operator(base_latex):
        return f"{base_latex}_{{{_convert(under)}}}"
    return f"\\underset{{{_convert(under)}}}{{{base_latex}}}"


def _munderover(tag: Tag) -> str:
    base, under, over = _expect(tag, 3)
    base_latex = _convert(base)
    if _is_big_operator(base_latex):
        return f"{base_latex}_{{{_convert(under)}}}^{{{_convert(over)}}}"
    return (
        f"\\overset{{{_convert(over)}}}"
        f"{{\\underset{{{_convert(under)}}}{{{base_latex}}}}}"
    )


def _fence(symbol: str) -> str:
    if not symbol:
        return "."
    return OPERATORS.get(symbol, symbol)


def _mfenced(tag: Tag) -> str:
    open_ = _fence(tag.get("open", "("))
    close = _fence(tag.get("close", ")"))
    separators = "".join(tag.get("separators", ",").split())
    items = [_convert(child) for child in _elements(tag)]

    # The last separator repeats when there are more items than separators.
    body = ""
    for pos, item in enumerate(items):
        if pos and separators:
            body += separators[min(pos - 1, len(separators) - 1)]
        body += item
    return f"\\left{open_}{body}\\right{close}"


def _mtable(tag: Tag) -> str:
    rows = []
    for row in _elements(tag):
        cells = _elements(row)
        # Labeled rows carry their equation label first.
        if row.name == "mlabeledtr":
            cells = cells[1:]
        rows.append(" & ".join(_convert(cell) for cell in cells))
    return "\\begin{matrix}" + " \\\\ ".join(rows) + "\\end{matrix}"


HANDLERS: dict[str, Callable[[Tag], str]] = {
    "math": _row,
    "mrow": _row,
    "mstyle": _row,
    "mpadded": _row,
    "menclose": _row,
    "merror": _row,
    "mtd": _row,
    "mi": _mi,
    "mn": _mn,
    "mo": _mo,
    "mtext": _mtext,
    "ms": _ms,
    "mspace": _mspace,
    "semantics": _semantics,
    "annotation": _nothing,
    "annotation-xml": _nothing,
    "none": _nothing,
    "mprescripts": _nothing,
    "mphantom": _mphantom,
    "mfrac": _mfrac,
    "msqrt": _msqrt,
    "mroot": _mroot,
    "msub": _msub,
    "msup": _msup,
    "msubsup": _msubsup,
    "mover": _mover,
    "munder": _munder,
    "munderover": _munderover,
    "mfenced": _mfenced,
    "mtable": _mtable,
}


def _convert(node: Tag) -> str:
    """Convert a single MathML element to LaTeX."""

    # Unknown presentation elements are transparent containers.
    handler = HANDLERS.get(node.name, _row)
    return handler(node)


def mathml_to_latex(markup: str) -> str:
    """Convert a serialized ``<math>`` element to LaTeX.

    Args:
        markup: MathML markup whose root is a ``math`` element.

    Returns:
        LaTeX source without delimiters.

    Raises:
        MathConversionError: When the markup has no ``math`` element or a
            layout element has the wrong number of children.
    """

    soup = BeautifulSoup(markup, "html.parser")
    root = soup.find("math")
    if root is None:
        raise MathConversionError("Fragment contains no <math> element")

    return " ".join(_convert(root).split())
