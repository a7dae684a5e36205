"""Layout engine input and output types."""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class LayoutItem:
    """Something to be given a rectangle, sized by ``weight``.

    ``payload`` is carried through to the placed rect untouched. ``children``
    holds nested items laid out inside this item's rect by the renderer;
    ``depth`` is a styling hint only.
    """

    id: str
    weight: float
    payload: Any = None
    label: str = ""
    kind: str = ""
    depth: int = 0
    children: Optional[tuple["LayoutItem", ...]] = None


@dataclass
class PlacedRect:
    """An item's position in container coordinates."""

    x: float
    y: float
    w: float
    h: float
    item: LayoutItem
    children: list["PlacedRect"] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.item.id

    @property
    def payload(self) -> Any:
        return self.item.payload

    @property
    def depth(self) -> int:
        return self.item.depth

    @property
    def area(self) -> float:
        return self.w * self.h

    @property
    def aspect_ratio(self) -> float:
        """Longer side over shorter side; 1.0 is a square."""
        short = min(self.w, self.h)
        if short <= 0:
            return float("inf")
        return max(self.w, self.h) / short

    def offset(self, dx: float, dy: float) -> "PlacedRect":
        return PlacedRect(self.x + dx, self.y + dy, self.w, self.h, self.item, self.children)

    def overlaps(self, other: "PlacedRect", tolerance: float = 1e-9) -> bool:
        """True when the interiors intersect; shared edges do not count."""
        return (
            self.x < other.x + other.w - tolerance
            and other.x < self.x + self.w - tolerance
            and self.y < other.y + other.h - tolerance
            and other.y < self.y + self.h - tolerance
        )

    def iter_all(self):
        """Yield this rect and every nested rect below it."""
        yield self
        for child in self.children:
            yield from child.iter_all()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.item.id,
            "label": self.item.label,
            "kind": self.item.kind,
            "depth": self.item.depth,
            "x": round(self.x, 4),
            "y": round(self.y, 4),
            "w": round(self.w, 4),
            "h": round(self.h, 4),
        }
        payload = self.item.payload
        for attr in ("coverable", "covered", "percent"):
            if hasattr(payload, attr):
                data[attr] = getattr(payload, attr)
        if self.children:
            data["children"] = [child.to_dict() for child in self.children]
        return data
