# src/wcag_auditor/dom/core.py
from typing import Any, Dict, Iterator, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Tags that are focusable and operable without any extra attributes.
NATIVE_INTERACTIVE_TAGS = frozenset({"a", "button", "input", "select", "textarea"})


class ResolvedStyle(BaseModel):
    """Subset of the computed style the capture harness resolves for each element."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    color: Optional[str] = None
    background_color: Optional[str] = Field(default=None, alias="backgroundColor")
    font_size_px: Optional[float] = Field(default=None, alias="fontSizePx")
    font_weight: Optional[Union[int, str]] = Field(default=None, alias="fontWeight")
    display: Optional[str] = None
    visibility: Optional[str] = None


class BoundingBox(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: float = Field(ge=0)
    height: float = Field(ge=0)

    @property
    def min_dimension(self) -> float:
        return min(self.width, self.height)


class ElementSnapshot(BaseModel):
    """
    Immutable snapshot of a single rendered DOM element.

    `text` holds only the element's own text nodes; `text_content` mirrors the
    DOM textContent (own text plus all descendants).
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    tag: str
    class_list: List[str] = Field(default_factory=list, alias="classList")
    attrs: Dict[str, str] = Field(default_factory=dict)
    style: ResolvedStyle = Field(default_factory=ResolvedStyle)
    box: Optional[BoundingBox] = None
    text: str = ""
    children: List['ElementSnapshot'] = Field(default_factory=list)

    @field_validator('tag', mode='before')
    @classmethod
    def normalize_tag(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator('class_list', mode='before')
    @classmethod
    def split_class_string(cls, v: Any) -> Any:
        """Accepts a raw `class` attribute string as well as a list."""
        if isinstance(v, str):
            return v.split()
        return v or []

    @field_validator('attrs', mode='before')
    @classmethod
    def stringify_attrs(cls, v: Any) -> Any:
        """
        Normalizes attribute values to strings.
        Boolean attributes: True means present (empty value), False/None means absent.
        """
        if not isinstance(v, dict):
            return v
        clean = {}
        for key, value in v.items():
            if value is None or value is False:
                continue
            if value is True:
                value = ""
            elif isinstance(value, (list, tuple)):
                value = " ".join(str(item) for item in value)
            clean[str(key).lower()] = str(value)
        return clean

    @field_validator('text', mode='before')
    @classmethod
    def none_text_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    # --- Attribute helpers ---

    def get_attr(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.attrs.get(name, default)

    def has_attr(self, name: str) -> bool:
        return name in self.attrs

    @property
    def element_id(self) -> Optional[str]:
        value = self.attrs.get('id')
        return value if value else None

    @property
    def role(self) -> str:
        return (self.attrs.get('role') or "").strip().lower()

    @property
    def aria_label(self) -> str:
        return (self.attrs.get('aria-label') or "").strip()

    @property
    def tabindex(self) -> Optional[int]:
        """Parsed tabindex, or None when absent or not an integer."""
        raw = self.attrs.get('tabindex')
        if raw is None:
            return None
        try:
            return int(raw.strip())
        except ValueError:
            return None

    @property
    def selector(self) -> str:
        """Short human-readable selector: #id, then .first-class, then the tag."""
        if self.element_id:
            return f"#{self.element_id}"
        if self.class_list:
            return f".{self.class_list[0]}"
        return self.tag

    # --- Text helpers ---

    @property
    def text_content(self) -> str:
        parts = [self.text] if self.text else []
        for child in self.children:
            child_text = child.text_content
            if child_text:
                parts.append(child_text)
        return " ".join(parts)

    @property
    def has_text(self) -> bool:
        return bool(self.text and self.text.strip())

    # --- Visibility & focus ---

    @property
    def is_hidden(self) -> bool:
        """Hidden by its own style, the `hidden` attribute, or a zero-area box."""
        if (self.style.display or "").lower() == "none":
            return True
        if (self.style.visibility or "").lower() in ("hidden", "collapse"):
            return True
        if self.has_attr('hidden'):
            return True
        if self.box is not None and (self.box.width == 0 or self.box.height == 0):
            return True
        return False

    @property
    def is_keyboard_focusable(self) -> bool:
        tabindex = self.tabindex
        if tabindex is not None:
            return tabindex >= 0
        return self.tag in NATIVE_INTERACTIVE_TAGS

    def iter_descendants(self) -> Iterator['ElementSnapshot']:
        """Depth-first, document-order iteration over all descendants (self excluded)."""
        for child in self.children:
            yield child
            yield from child.iter_descendants()
