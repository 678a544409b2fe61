# src/wcag_auditor/dom/models.py
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field, PrivateAttr

from .core import ElementSnapshot


class SnapshotDocument(BaseModel):
    """
    Root container for one captured page.

    The element tree itself is immutable; after validation the document builds
    read-only lookup indexes (document order, parents, ids) that every rule
    shares for the duration of a validation run.
    """
    root: ElementSnapshot
    url: Optional[str] = None
    captured_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    _ordered: List[ElementSnapshot] = PrivateAttr(default_factory=list)
    _parents: Dict[int, ElementSnapshot] = PrivateAttr(default_factory=dict)
    _ids: Dict[str, ElementSnapshot] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context) -> None:
        stack = [(self.root, None)]
        while stack:
            node, parent = stack.pop()
            self._ordered.append(node)
            if parent is not None:
                self._parents[id(node)] = parent
            node_id = node.element_id
            # First occurrence wins, like document.getElementById
            if node_id and node_id not in self._ids:
                self._ids[node_id] = node
            for child in reversed(node.children):
                stack.append((child, node))

    # --- Traversal ---

    def elements(self) -> List[ElementSnapshot]:
        """All elements in document order, root included."""
        return list(self._ordered)

    def find_all(self, predicate: Callable[[ElementSnapshot], bool]) -> List[ElementSnapshot]:
        return [el for el in self._ordered if predicate(el)]

    def parent_of(self, element: ElementSnapshot) -> Optional[ElementSnapshot]:
        return self._parents.get(id(element))

    def ancestors_of(self, element: ElementSnapshot) -> Iterable[ElementSnapshot]:
        parent = self.parent_of(element)
        while parent is not None:
            yield parent
            parent = self.parent_of(parent)

    def siblings_after(self, element: ElementSnapshot, limit: Optional[int] = None) -> List[ElementSnapshot]:
        parent = self.parent_of(element)
        if parent is None:
            return []
        following = []
        seen = False
        for child in parent.children:
            if seen:
                following.append(child)
            elif child is element:
                seen = True
        return following[:limit] if limit is not None else following

    # --- id references ---

    def get_by_id(self, element_id: str) -> Optional[ElementSnapshot]:
        return self._ids.get(element_id)

    def resolves_ids(self, idrefs: Optional[str]) -> bool:
        """True when a space separated idref list points to at least one existing node."""
        if not idrefs:
            return False
        return any(ref in self._ids for ref in idrefs.split())

    def labels_for(self, control: ElementSnapshot) -> List[ElementSnapshot]:
        """Explicit `<label for=...>` labels plus an implicit wrapping `<label>`."""
        labels = []
        control_id = control.element_id
        if control_id:
            labels.extend(
                el for el in self._ordered if el.tag == "label" and el.get_attr("for") == control_id
            )
        for ancestor in self.ancestors_of(control):
            if ancestor.tag == "label":
                if all(ancestor is not lbl for lbl in labels):
                    labels.append(ancestor)
                break
        return labels
