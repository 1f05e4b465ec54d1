"""Selection sets: the variations and add-ons chosen for one cart or order line.

A selection set is stored on cart lines, saved cart lines and order lines as
canonical JSON. Two lines with the same menu item, restaurant and selection
signature describe the same configuration and are merged rather than
duplicated.
"""

import json

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import List, String, ValueObject

from ordering.domain import ordering


@ordering.value_object
class VariationSelection:
    """The one option picked from a single-choice variation (e.g. size)."""

    variation_id: String(required=True, max_length=255)
    selected_option_id: String(required=True, max_length=255)


@ordering.value_object
class AddOnSelection:
    """The options picked from one add-on group (e.g. toppings)."""

    add_on_id: String(required=True, max_length=255)
    selected_option_ids: List(content_type=String(max_length=255))

    @invariant.post
    def options_are_picked_once(self):
        if len(set(self.selected_option_ids)) != len(self.selected_option_ids):
            raise ValidationError({"selected_option_ids": [f"Duplicate option in add-on {self.add_on_id}"]})

    def canonical(self) -> "AddOnSelection":
        return AddOnSelection(add_on_id=self.add_on_id, selected_option_ids=sorted(self.selected_option_ids))


@ordering.value_object
class SelectionSet:
    variations: List(content_type=ValueObject(VariationSelection))
    add_ons: List(content_type=ValueObject(AddOnSelection))

    @invariant.post
    def each_variation_is_chosen_once(self):
        variation_ids = [v.variation_id for v in self.variations]
        if len(set(variation_ids)) != len(variation_ids):
            raise ValidationError({"variations": ["A variation can only be chosen once"]})

    @invariant.post
    def each_add_on_group_appears_once(self):
        add_on_ids = [a.add_on_id for a in self.add_ons]
        if len(set(add_on_ids)) != len(add_on_ids):
            raise ValidationError({"add_ons": ["An add-on group can only appear once"]})

    @classmethod
    def build(cls, variations=None, add_ons=None) -> "SelectionSet":
        """Build a canonical selection set from plain dicts.

        Accepts ``[{"variation_id", "selected_option_id"}]`` and
        ``[{"add_on_id", "selected_option_ids": [...]}]``.
        """
        return cls(
            variations=[
                VariationSelection(
                    variation_id=str(v["variation_id"]),
                    selected_option_id=str(v["selected_option_id"]),
                )
                for v in (variations or [])
            ],
            add_ons=[
                AddOnSelection(
                    add_on_id=str(a["add_on_id"]),
                    selected_option_ids=[str(o) for o in a.get("selected_option_ids", [])],
                )
                for a in (add_ons or [])
            ],
        ).canonical()

    @classmethod
    def empty(cls) -> "SelectionSet":
        return cls(variations=[], add_ons=[])

    def canonical(self) -> "SelectionSet":
        """Return an order-independent copy.

        Variations sort by variation id. Each add-on's option ids sort first,
        then add-ons sort by add-on id.
        """
        return SelectionSet(
            variations=sorted(self.variations, key=lambda v: v.variation_id),
            add_ons=sorted((a.canonical() for a in self.add_ons), key=lambda a: a.add_on_id),
        )

    def to_dict(self) -> dict:
        canonical = self.canonical()
        return {
            "variations": [
                {"variation_id": v.variation_id, "selected_option_id": v.selected_option_id}
                for v in canonical.variations
            ],
            "add_ons": [
                {"add_on_id": a.add_on_id, "selected_option_ids": list(a.selected_option_ids)}
                for a in canonical.add_ons
            ],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))

    @classmethod
    def from_json(cls, raw: str | None) -> "SelectionSet":
        if not raw:
            return cls.empty()
        data = json.loads(raw)
        return cls.build(data.get("variations"), data.get("add_ons"))

    def signature(self) -> str:
        """Deterministic key identifying this configuration for merge purposes."""
        return self.to_json()

    @property
    def variation_option_ids(self) -> set[str]:
        return {v.selected_option_id for v in self.variations}

    @property
    def add_on_option_ids(self) -> set[str]:
        return {option_id for a in self.add_ons for option_id in a.selected_option_ids}

    def is_empty(self) -> bool:
        return not self.variations and not self.add_ons
