"""
Generic grouping of record collections by a status-like field.

Works on any record shape: the field is either an attribute/key name or a
callable returning the value. Values are bucketed by their string form.
"""

from dataclasses import dataclass, field
from enum import Enum
from functools import cmp_to_key
from typing import Any, Callable, Dict, Generic, Iterable, List, Mapping, Sequence, Tuple, TypeVar, Union

T = TypeVar("T")

FieldSelector = Union[str, Callable[[Any], Any]]
GroupedRecords = Dict[str, List[T]]

UNASSIGNED_LABEL = "Not specified"

STATUS_ORDERS: Dict[str, List[str]] = {
    "appointments": ["scheduled", "completed", "cancelled", "no-show"],
    "payments": ["pending", "paid", "failed", "refunded"],
    "patients": ["active", "inactive", "archived"],
}

STATUS_LABELS: Dict[str, str] = {
    "scheduled": "Scheduled",
    "completed": "Completed",
    "cancelled": "Cancelled",
    "no-show": "No-show",
    "pending": "Awaiting payment",
    "paid": "Paid",
    "failed": "Failed",
    "refunded": "Refunded",
    "active": "Active",
    "inactive": "Inactive",
    "archived": "Archived",
    UNASSIGNED_LABEL: UNASSIGNED_LABEL,
}


class GroupSortBy(str, Enum):
    ALPHABETICAL = "alphabetical"
    COUNT = "count"
    CUSTOM = "custom"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class GroupConfig:
    """How groups are ordered and whether listed-but-empty groups are kept."""
    sort_by: GroupSortBy = GroupSortBy.ALPHABETICAL
    sort_order: SortOrder = SortOrder.ASC
    custom_order: Tuple[str, ...] = ()
    show_empty_groups: bool = False

    def __post_init__(self):
        object.__setattr__(self, "sort_by", GroupSortBy(self.sort_by))
        object.__setattr__(self, "sort_order", SortOrder(self.sort_order))
        object.__setattr__(self, "custom_order", tuple(self.custom_order))


@dataclass(frozen=True)
class GroupSize:
    name: str
    size: int


@dataclass
class GroupStatistics:
    total_groups: int = 0
    total_records: int = 0
    group_sizes: Dict[str, int] = field(default_factory=dict)
    largest_group: GroupSize = GroupSize("", 0)
    smallest_group: GroupSize = GroupSize("", 0)


def stringify(value: Any) -> str:
    """String form used for group keys and search matching."""
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def field_value(record: Any, selector: FieldSelector) -> Any:
    """Read a field from a mapping, an object attribute or via a callable."""
    if callable(selector):
        return selector(record)
    if isinstance(record, Mapping):
        return record.get(selector)
    return getattr(record, selector, None)


class GroupingEngine(Generic[T]):
    """
    Partitions records into ordered, named groups.

    Every record lands in exactly one group; records whose field is missing
    or falsy are collected under ``unassigned_label``.
    """

    def __init__(self, unassigned_label: str = UNASSIGNED_LABEL):
        self.unassigned_label = unassigned_label

    def group(
        self,
        records: Iterable[T],
        selector: FieldSelector,
        config: GroupConfig | None = None,
    ) -> GroupedRecords:
        """
        Group ``records`` by the value of ``selector``.

        Args:
            records: The collection to partition
            selector: Attribute/key name, or a callable returning the value
            config: Ordering and empty-group options

        Returns:
            Mapping of group key to records, in the configured key order
        """
        config = config or GroupConfig()
        grouped: GroupedRecords = {}

        for record in records:
            value = field_value(record, selector)
            key = stringify(value) if value else self.unassigned_label
            grouped.setdefault(key, []).append(record)

        if config.show_empty_groups and config.custom_order:
            for key in config.custom_order:
                grouped.setdefault(key, [])

        return self.sort_groups(grouped, config)

    def sort_groups(self, grouped: Mapping[str, List[T]], config: GroupConfig) -> GroupedRecords:
        """Reorder an existing grouping; ties keep their current order."""
        comparator = self._comparator(config)
        entries = sorted(grouped.items(), key=cmp_to_key(comparator))
        return {key: list(records) for key, records in entries}

    def statistics(self, grouped: Mapping[str, Sequence[T]]) -> GroupStatistics:
        """
        Summarize a grouping.

        Largest and smallest consider non-empty groups only; on ties the
        first group in iteration order wins.
        """
        stats = GroupStatistics(total_groups=len(grouped))
        largest: GroupSize | None = None
        smallest: GroupSize | None = None

        for name, records in grouped.items():
            size = len(records)
            stats.group_sizes[name] = size
            stats.total_records += size

            if size == 0:
                continue
            if largest is None or size > largest.size:
                largest = GroupSize(name, size)
            if smallest is None or size < smallest.size:
                smallest = GroupSize(name, size)

        if largest is not None:
            stats.largest_group = largest
        if smallest is not None:
            stats.smallest_group = smallest

        return stats

    def filter(
        self,
        grouped: Mapping[str, Sequence[T]],
        search_term: str,
        fields: Sequence[FieldSelector],
    ) -> GroupedRecords:
        """
        Keep records where any listed field contains ``search_term``.

        Matching is case-insensitive. Groups left empty are dropped; a blank
        search term returns every group unchanged.
        """
        if not search_term.strip():
            return {name: list(records) for name, records in grouped.items()}

        needle = search_term.lower()
        filtered: GroupedRecords = {}

        for name, records in grouped.items():
            matches = [record for record in records if self._matches(record, needle, fields)]
            if matches:
                filtered[name] = matches

        return filtered

    @staticmethod
    def _matches(record: Any, needle: str, fields: Sequence[FieldSelector]) -> bool:
        for selector in fields:
            value = field_value(record, selector)
            if value and needle in stringify(value).lower():
                return True
        return False

    @staticmethod
    def _comparator(config: GroupConfig) -> Callable[[Tuple[str, List[T]], Tuple[str, List[T]]], int]:
        custom_rank = {key: index for index, key in enumerate(config.custom_order)}
        direction = -1 if config.sort_order is SortOrder.DESC else 1

        def alphabetical(key_a: str, key_b: str) -> int:
            left, right = (key_a.casefold(), key_a), (key_b.casefold(), key_b)
            return (left > right) - (left < right)

        def compare(entry_a: Tuple[str, List[T]], entry_b: Tuple[str, List[T]]) -> int:
            key_a, records_a = entry_a
            key_b, records_b = entry_b

            if config.sort_by is GroupSortBy.COUNT:
                comparison = len(records_b) - len(records_a)
            elif config.sort_by is GroupSortBy.CUSTOM:
                rank_a = custom_rank.get(key_a)
                rank_b = custom_rank.get(key_b)
                if rank_a is not None and rank_b is not None:
                    comparison = rank_a - rank_b
                elif rank_a is not None:
                    comparison = -1
                elif rank_b is not None:
                    comparison = 1
                else:
                    comparison = alphabetical(key_a, key_b)
            else:
                comparison = alphabetical(key_a, key_b)

            return direction * comparison

        return compare

