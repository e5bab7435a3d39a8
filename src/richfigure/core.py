"""Core figure rewriting for richfigure."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from typing import Any, Callable, List, Mapping, Optional, Tuple, Union

from bs4 import BeautifulSoup, Tag
from bs4.dammit import EntitySubstitution
from bs4.formatter import HTMLFormatter

from .tree import (
    Splice,
    element_children,
    is_text,
    next_element_sibling,
    tag_predicate,
    visit,
)

LOG = logging.getLogger("richfigure")

LOADING_VALUES = ("eager", "lazy")
DEFAULT_PARSER = "html.parser"

# U+FEFF counts as leading whitespace, as in JavaScript's trimStart().
CAPTION_START_RE = re.compile(r"^[\s\ufeff]*:")
CAPTION_MARKER_RE = re.compile(r"^[\s\ufeff]*:[\s\ufeff]*")
LOG_FORMAT = "%(levelname)s: %(message)s"


class BadElementError(Exception):
    """Raised when a paragraph element is found without a parent."""

    def __init__(self, tag_name: str):
        super().__init__(tag_name)
        self.tag_name = tag_name

    def __str__(self) -> str:
        return f"The {self.tag_name} element does not have a parent"


def _coerce_class_list(value: Any, key: str) -> Optional[List[str]]:
    if value is None:
        return None
    if isinstance(value, str):
        return value.split()
    if isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value):
        return list(value)
    raise ValueError(f"Invalid value for {key}: expected a list of class names, got {value!r}")


@dataclass
class FigureConfig:
    loading: Optional[str] = None
    figure_class: Optional[List[str]] = None
    wrap: bool = False
    wrap_class: Optional[List[str]] = None

    def validate(self) -> "FigureConfig":
        if self.loading is not None and self.loading not in LOADING_VALUES:
            raise ValueError(
                f"Invalid value for loading: {self.loading!r} (expected one of {', '.join(LOADING_VALUES)})"
            )
        self.figure_class = _coerce_class_list(self.figure_class, "figureClass")
        self.wrap_class = _coerce_class_list(self.wrap_class, "wrapClass")
        return self

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, Any]]) -> "FigureConfig":
        """Build a config from camelCase or snake_case keys; unknown keys are ignored."""
        if not options:
            return cls()

        def _pick(*keys: str) -> Any:
            for key in keys:
                if key in options:
                    return options[key]
            return None

        wrap = _pick("wrap")
        return cls(
            loading=_pick("loading"),
            figure_class=_pick("figureClass", "figure_class"),
            wrap=False if wrap is None else wrap,
            wrap_class=_pick("wrapClass", "wrap_class"),
        ).validate()


ConfigLike = Union[FigureConfig, Mapping[str, Any], None]


def _as_config(config: ConfigLike) -> FigureConfig:
    if isinstance(config, FigureConfig):
        return replace(config).validate()
    return FigureConfig.from_mapping(config)


def setup_logging(verbose: bool, debug: bool) -> None:
    """Send richfigure messages to stderr at WARNING, INFO (verbose) or DEBUG (debug)."""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT)

    LOG.setLevel(level)
    LOG.propagate = False
    if not LOG.handlers:
        LOG.addHandler(logging.StreamHandler())
    for handler in LOG.handlers:
        handler.setLevel(level)
        if handler.formatter is None:
            handler.setFormatter(logging.Formatter(LOG_FORMAT))


def clean_caption_text(text: str) -> str:
    """Strip one leading colon marker and the whitespace around it."""
    return CAPTION_MARKER_RE.sub("", text, count=1)


class SourceOrderFormatter(HTMLFormatter):
    """Minimal HTML formatter that keeps attributes in document order."""

    def __init__(self):
        super().__init__(entity_substitution=EntitySubstitution.substitute_xml)

    def attributes(self, tag):
        if tag.attrs is None:
            return []
        return list(tag.attrs.items())


SOURCE_ORDER_FORMATTER = SourceOrderFormatter()


def _owner_document(node: Tag) -> Optional[BeautifulSoup]:
    if isinstance(node, BeautifulSoup):
        return node
    for ancestor in node.parents:
        if isinstance(ancestor, BeautifulSoup):
            return ancestor
    return None


def _new_tag(document: Optional[BeautifulSoup], name: str) -> Tag:
    if document is not None:
        return document.new_tag(name)
    return Tag(name=name)


def match_figure_pair(node: Tag, index: int, parent: Tag) -> Optional[Tuple[Tag, Tag, int]]:
    """Return ``(image, caption_paragraph, caption_index)`` when ``node`` opens a figure pair."""
    children = element_children(node)
    if len(children) != 1:
        return None
    image = children[0]
    if image.name != "img":
        return None

    sibling, sibling_index = next_element_sibling(parent, index)
    if sibling is None or sibling.name != "p":
        return None
    if not sibling.contents:
        return None

    first = sibling.contents[0]
    if not is_text(first):
        return None
    if not CAPTION_START_RE.match(str(first)):
        return None
    return image, sibling, sibling_index


def build_figure(document: Optional[BeautifulSoup], image: Tag, caption: Tag, config: FigureConfig) -> Tag:
    if config.loading:
        image["loading"] = config.loading

    figure = _new_tag(document, "figure")
    figcaption = _new_tag(document, "figcaption")
    figure.append(image)
    figure.append(figcaption)
    for child in list(caption.contents):
        figcaption.append(child)

    first = figcaption.contents[0]
    first.replace_with(type(first)(clean_caption_text(str(first))))

    if config.figure_class is not None:
        figure["class"] = list(config.figure_class)

    if config.wrap is not True:
        return figure

    wrapper = _new_tag(document, "div")
    wrapper.append(figure)
    if config.wrap_class is not None:
        wrapper["class"] = list(config.wrap_class)
    return wrapper


def rewrite_figures(tree: Tag, config: ConfigLike = None) -> int:
    """Rewrite every image/caption paragraph pair under ``tree`` and return the count."""
    cfg = _as_config(config)
    document = _owner_document(tree)

    def _rewrite(node: Tag, index: Optional[int], parent: Optional[Tag]) -> Optional[Splice]:
        if parent is None or index is None:
            raise BadElementError(node.name)
        matched = match_figure_pair(node, index, parent)
        if matched is None:
            return None
        image, caption, caption_index = matched
        replacement = build_figure(document, image, caption, cfg)
        LOG.debug(
            "Rewrote image %s and caption into <%s> at index %d",
            image.get("src", "<no src>"),
            replacement.name,
            index,
        )
        return Splice(parent=parent, start=index, stop=caption_index + 1, replacement=replacement)

    return visit(tree, tag_predicate("p"), _rewrite)


def transform(tree: Tag, config: ConfigLike = None) -> None:
    rewrite_figures(tree, config)


def richer_figure(config: ConfigLike = None) -> Callable[[Tag], None]:
    """Return a transformer bound to ``config``, for use as a pipeline step."""
    cfg = _as_config(config)

    def _transformer(tree: Tag) -> None:
        rewrite_figures(tree, cfg)

    return _transformer


def process_html(markup: str, config: ConfigLike = None, *, parser: str = DEFAULT_PARSER) -> str:
    soup = BeautifulSoup(markup, parser)
    count = rewrite_figures(soup, config)
    LOG.info("Rewrote %d figure(s)", count)
    return soup.decode(formatter=SOURCE_ORDER_FORMATTER)
