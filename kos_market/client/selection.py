from typing import Iterable, Iterator


class SelectionTracker:
    """Set of listing ids picked in the admin table for a bulk action.

    Owned by a single UI session. It keeps insertion order for display but
    compares with set semantics, and never talks to the record store: stale
    ids have to be dropped by the caller with retain() after a refresh.
    """

    def __init__(self, selected_ids: Iterable[int] = ()) -> None:
        self._selected: list[int] = list(dict.fromkeys(selected_ids))

    @property
    def selected_ids(self) -> list[int]:
        return list(self._selected)

    def toggle(self, listing_id: int) -> None:
        if listing_id in self._selected:
            self._selected.remove(listing_id)
        else:
            self._selected.append(listing_id)

    def clear(self) -> None:
        self._selected = []

    def toggle_select_all(self, all_ids: Iterable[int]) -> None:
        # one control for both "select all" and "deselect all"
        all_ids = list(dict.fromkeys(all_ids))
        if set(self._selected) == set(all_ids):
            self.clear()
        else:
            self._selected = all_ids

    def retain(self, current_ids: Iterable[int]) -> None:
        current = set(current_ids)
        self._selected = [i for i in self._selected if i in current]

    def __contains__(self, listing_id: object) -> bool:
        return listing_id in self._selected

    def __iter__(self) -> Iterator[int]:
        return iter(list(self._selected))

    def __len__(self) -> int:
        return len(self._selected)

    def __repr__(self) -> str:
        return f"SelectionTracker({self._selected!r})"
