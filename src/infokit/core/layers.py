"""Ordered layer list — index 0 is the bottom-most object."""

from typing import Optional
from pydantic import BaseModel, Field

from .objects import CanvasObject, describe_object


class LayerStack(BaseModel):
    """Ordered collection of canvas objects with stacking operations."""
    objects: list[CanvasObject] = Field(default_factory=list)

    def get(self, object_id: str) -> Optional[CanvasObject]:
        for obj in self.objects:
            if obj.id == object_id:
                return obj
        return None

    def index_of(self, object_id: str) -> int:
        for i, obj in enumerate(self.objects):
            if obj.id == object_id:
                return i
        return -1

    def of_type(self, object_type: str) -> list[CanvasObject]:
        return [o for o in self.objects if o.type == object_type]

    def count(self, object_type: str) -> int:
        return sum(1 for o in self.objects if o.type == object_type)

    def append(self, obj: CanvasObject) -> CanvasObject:
        self.objects.append(obj)
        return obj

    def insert_bottom(self, obj: CanvasObject) -> CanvasObject:
        self.objects.insert(0, obj)
        return obj

    def replace(self, obj: CanvasObject) -> bool:
        """Swap in ``obj`` for the object with the same id, keeping its position."""
        index = self.index_of(obj.id)
        if index == -1:
            return False
        self.objects[index] = obj
        return True

    def remove(self, object_id: str) -> bool:
        original_len = len(self.objects)
        self.objects = [o for o in self.objects if o.id != object_id]
        return len(self.objects) < original_len

    def remove_type(self, object_type: str) -> int:
        original_len = len(self.objects)
        self.objects = [o for o in self.objects if o.type != object_type]
        return original_len - len(self.objects)

    def reorder(self, from_index: int, to_index: int) -> bool:
        """Move the object at ``from_index`` so it ends up at ``to_index``.

        ``from_index`` counts from the bottom only: a negative or out-of-range
        index is a no-op rather than counting back from the top.
        """
        if not 0 <= from_index < len(self.objects):
            return False
        obj = self.objects.pop(from_index)
        self.objects.insert(to_index, obj)
        return True

    def move_to_front(self, object_id: str) -> bool:
        index = self.index_of(object_id)
        if index == -1 or index == len(self.objects) - 1:
            return False
        self.objects.append(self.objects.pop(index))
        return True

    def move_to_back(self, object_id: str) -> bool:
        index = self.index_of(object_id)
        if index <= 0:
            return False
        self.objects.insert(0, self.objects.pop(index))
        return True

    def to_summary(self) -> list[dict]:
        """Top-most first, the way a layers panel lists them."""
        return [
            {
                "id": o.id,
                "index": i,
                "type": o.type,
                "name": o.name,
                "detail": describe_object(o),
                "locked": o.locked,
                "visible": o.visible,
            }
            for i, o in reversed(list(enumerate(self.objects)))
        ]
