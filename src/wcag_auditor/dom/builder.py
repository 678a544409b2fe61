# src/wcag_auditor/dom/builder.py
import json
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from bs4 import BeautifulSoup, Comment, NavigableString, Tag
from pydantic import ValidationError

from wcag_auditor.exceptions import InputError
from .core import BoundingBox, ElementSnapshot, ResolvedStyle
from .models import SnapshotDocument

logger = logging.getLogger(__name__)

SKIPPED_TAGS = frozenset({"script", "style", "template", "noscript"})

# Browser defaults used when no inline style resolves a value.
DEFAULT_COLOR = "#000000"
DEFAULT_BACKGROUND = "#ffffff"
DEFAULT_FONT_SIZE_PX = 16.0
DEFAULT_FONT_WEIGHT = "400"

_LENGTH = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*(px|pt|em|rem|%)?\s*$", re.IGNORECASE)


def parse_inline_style(style: Optional[str]) -> Dict[str, str]:
    """Splits a `style` attribute into a lower-cased property map."""
    declarations = {}
    if not style:
        return declarations
    for chunk in style.split(";"):
        if ":" not in chunk:
            continue
        prop, value = chunk.split(":", 1)
        value = value.replace("!important", "").strip()
        if prop.strip() and value:
            declarations[prop.strip().lower()] = value
    return declarations


def length_to_px(value: Optional[str], parent_font_px: float = DEFAULT_FONT_SIZE_PX) -> Optional[float]:
    """Converts px/pt/em/rem lengths to pixels. Percentages and keywords return None."""
    if value is None:
        return None
    match = _LENGTH.match(str(value))
    if not match:
        return None
    number, unit = float(match.group(1)), (match.group(2) or "px").lower()
    if unit == "px":
        return number
    if unit == "pt":
        return number * 4 / 3
    if unit == "em":
        return number * parent_font_px
    if unit == "rem":
        return number * DEFAULT_FONT_SIZE_PX
    return None


class SnapshotBuilder:
    """
    Builds SnapshotDocument trees for the engine.

    Capture-harness output (JSON / dict) is validated as-is. Server-rendered
    HTML is parsed with BeautifulSoup and only inline styles are resolved;
    no cascade or layout is performed.
    """

    # --- Harness input ---

    def from_dict(self, data: Dict[str, Any], url: Optional[str] = None) -> SnapshotDocument:
        if not isinstance(data, dict):
            raise InputError(f"Snapshot must be a JSON object, got {type(data).__name__}")

        # Accept both a document wrapper {"url", "root"} and a bare element tree.
        payload = data if "root" in data else {"root": data}
        if url and not payload.get("url"):
            payload = {**payload, "url": url}
        if not payload.get("root"):
            raise InputError("Snapshot has no root element")

        try:
            return SnapshotDocument.model_validate(payload)
        except ValidationError as e:
            raise InputError(f"Malformed snapshot: {e}") from e

    def from_json(self, text: str, url: Optional[str] = None) -> SnapshotDocument:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise InputError(f"Snapshot is not valid JSON: {e}") from e
        return self.from_dict(data, url=url)

    # --- Server-rendered HTML ---

    def from_html(self, html: str, url: Optional[str] = None) -> SnapshotDocument:
        if not html or not html.strip():
            raise InputError("HTML document is empty")

        # Basic cleanup of potentially dirty HTML (e.g., BOM)
        clean_html = html.replace('\ufeff', '').strip()
        soup = BeautifulSoup(clean_html, 'html.parser')

        root_tag = soup.find('html') or soup.body
        if root_tag is None:
            # Fragment without <html>/<body>: wrap the top-level nodes
            wrapper = soup.new_tag('body')
            for node in list(soup.contents):
                wrapper.append(node.extract())
            root_tag = wrapper

        inherited = {
            "color": DEFAULT_COLOR,
            "background": DEFAULT_BACKGROUND,
            "font_size_px": DEFAULT_FONT_SIZE_PX,
            "font_weight": DEFAULT_FONT_WEIGHT,
            "visibility": "visible",
        }
        root = self._build_tree(root_tag, inherited)
        logger.debug("Built snapshot from HTML (%s)", url or "inline")
        return SnapshotDocument(root=root, url=url)

    def _build_tree(self, tag: Tag, inherited: Dict[str, Any]) -> ElementSnapshot:
        """Recursively converts a BeautifulSoup Tag, resolving inherited style values."""
        declarations = parse_inline_style(tag.get('style'))
        resolved = self._resolve_style(declarations, inherited)

        children: List[ElementSnapshot] = []
        own_text: List[str] = []
        for child in tag.children:
            if isinstance(child, Comment):
                continue
            if isinstance(child, Tag):
                if child.name in SKIPPED_TAGS:
                    continue
                children.append(self._build_tree(child, resolved))
            elif isinstance(child, NavigableString):
                chunk = " ".join(str(child).split())
                if chunk:
                    own_text.append(chunk)

        attrs = {k: v for k, v in tag.attrs.items() if k != 'class'}
        return ElementSnapshot(
            tag=tag.name,
            class_list=tag.get('class') or [],
            attrs=attrs,
            style=ResolvedStyle(
                color=resolved["color"],
                background_color=resolved["background"],
                font_size_px=resolved["font_size_px"],
                font_weight=resolved["font_weight"],
                display=declarations.get("display"),
                visibility=resolved["visibility"],
            ),
            box=self._resolve_box(tag, declarations, resolved["font_size_px"]),
            text=" ".join(own_text),
            children=children,
        )

    @staticmethod
    def _resolve_style(declarations: Dict[str, str], inherited: Dict[str, Any]) -> Dict[str, Any]:
        resolved = dict(inherited)
        if "color" in declarations:
            resolved["color"] = declarations["color"]

        background = declarations.get("background-color") or declarations.get("background")
        # Only a plain color replaces the backdrop; gradients/images keep the parent's
        if background and not background.lower().startswith(("url(", "linear-gradient", "radial-gradient")):
            if background.strip().lower() != "transparent":
                resolved["background"] = background.split()[0] if background.startswith("#") else background

        if "font-size" in declarations:
            size = length_to_px(declarations["font-size"], inherited["font_size_px"])
            if size is not None:
                resolved["font_size_px"] = size
        if "font-weight" in declarations:
            resolved["font_weight"] = declarations["font-weight"]
        if "visibility" in declarations:
            resolved["visibility"] = declarations["visibility"]
        return resolved

    @staticmethod
    def _resolve_box(tag: Tag, declarations: Dict[str, str], font_px: float) -> Optional[BoundingBox]:
        width = length_to_px(declarations.get("width"), font_px)
        height = length_to_px(declarations.get("height"), font_px)
        if width is None:
            width = length_to_px(tag.get('width'), font_px)
        if height is None:
            height = length_to_px(tag.get('height'), font_px)
        if width is None or height is None or width < 0 or height < 0:
            return None
        return BoundingBox(width=width, height=height)
