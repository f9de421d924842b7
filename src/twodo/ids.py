#!/usr/bin/env python3
"""
Short, typable codes for long task identifiers.

An index is built from one task snapshot and lives for one command. Codes are
only meaningful against the index that issued them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .offset import clean_content_for_display
from .tasks import TaskRef

HASH_BUCKETS = 36 ** 3
MIN_CODE_LENGTH = 2
BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"
UNKNOWN_TASK = "Unknown task"


class ShortIdError(LookupError):
    """Base class for short code resolution failures."""

    def describe(self) -> List[str]:
        return [str(self)]


class TaskNotFoundError(ShortIdError):
    """Raised when a typed code matches no indexed task."""

    def __init__(self, typed: str):
        super().__init__(f"No task found matching '{typed}'")
        self.typed = typed

    def describe(self) -> List[str]:
        return [str(self), "Try: twodo ids to see all task IDs"]


@dataclass(frozen=True)
class Candidate:
    """
    One task matched by an ambiguous prefix.

    Attributes
    ----------
    code : str
        Short code of the matching task.
    content : str
        Task content, cleaned for display.
    """

    code: str
    content: str


class AmbiguousIdError(ShortIdError):
    """Raised when a typed code is a prefix of several indexed codes."""

    def __init__(self, typed: str, candidates: Sequence[Candidate]):
        super().__init__(f"Ambiguous ID '{typed}' matches multiple tasks")
        self.typed = typed
        self.candidates = list(candidates)

    def describe(self) -> List[str]:
        lines = [f"{self}:"]
        for candidate in self.candidates:
            lines.append(f'    {candidate.code} - "{candidate.content}"')
        lines.append("Use a longer prefix to disambiguate")
        return lines


def _utf16_units(value: str) -> Iterator[int]:
    """Yield the UTF-16 code units of a string, surrogate pairs included."""
    data = value.encode("utf-16-le", "surrogatepass")
    for offset in range(0, len(data), 2):
        yield data[offset] | (data[offset + 1] << 8)


def simple_hash(value: str) -> int:
    """
    Hash an identifier into one of 36**3 buckets.

    The hash is a 31-multiplier polynomial over UTF-16 code units, wrapped to
    a signed 32-bit integer before taking its absolute value.

    Examples
    --------
    >>> simple_hash("a")
    97
    >>> simple_hash("ab")
    3105
    >>> simple_hash("")
    0
    """
    result = 0
    for unit in _utf16_units(value):
        result = (result * 31 + unit) & 0xFFFFFFFF
    if result >= 0x80000000:
        result -= 0x100000000
    return abs(result) % HASH_BUCKETS


def to_base36(number: int) -> str:
    """
    Render a non-negative integer in lower-case base 36.

    Examples
    --------
    >>> to_base36(0)
    '0'
    >>> to_base36(3105)
    '2e9'
    >>> to_base36(46655)
    'zzz'
    """
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def short_code_for(full_id: str, taken: Iterable[str] = ()) -> str:
    """
    Derive the short code for an identifier given the codes already issued.

    Parameters
    ----------
    full_id : str
        Long task identifier.
    taken : Iterable[str], optional
        Codes already assigned in the current index.

    Returns
    -------
    str
        Unused lower-case code.

    Examples
    --------
    >>> short_code_for("a")
    '2p'
    >>> short_code_for("a", taken={"2p"})
    '2p0'
    >>> short_code_for("a", taken={"2p", "2p0"})
    '2p1'
    """
    taken = taken if isinstance(taken, (set, frozenset, dict)) else set(taken)
    base = to_base36(simple_hash(full_id)).rjust(MIN_CODE_LENGTH, "0")
    candidate = base
    counter = 0
    while candidate in taken:
        candidate = base + to_base36(counter)
        counter += 1
    # A 3-character base grows past 4 characters from its 37th collision on.
    return candidate.lower()


@dataclass
class ShortIdIndex:
    """
    Bidirectional mapping between short codes and long task identifiers.

    Attributes
    ----------
    code_to_id : Dict[str, str]
        Short code to long id, in index order.
    id_to_code : Dict[str, str]
        Long id to short code.
    id_to_task : Dict[str, TaskRef]
        Long id to task, for messages.
    """

    code_to_id: Dict[str, str] = field(default_factory=dict)
    id_to_code: Dict[str, str] = field(default_factory=dict)
    id_to_task: Dict[str, TaskRef] = field(default_factory=dict)

    @classmethod
    def build(cls, tasks: Iterable[TaskRef]) -> "ShortIdIndex":
        """
        Assign short codes to a task snapshot.

        Tasks are processed oldest first (ties keep snapshot order) so a fixed
        snapshot always yields the same codes.

        Parameters
        ----------
        tasks : Iterable[TaskRef]
            Complete task snapshot.

        Returns
        -------
        ShortIdIndex
            Populated index.

        Examples
        --------
        >>> index = ShortIdIndex.build([
        ...     TaskRef(id="ab", content="Second", created_at="2024-01-02"),
        ...     TaskRef(id="a", content="First", created_at="2024-01-01"),
        ... ])
        >>> index.code_to_id
        {'2p': 'a', '2e9': 'ab'}
        """
        index = cls()
        ordered = sorted(tasks, key=lambda task: task.created_at)
        for task in ordered:
            if task.id in index.id_to_code:
                continue
            code = short_code_for(task.id, index.code_to_id)
            index.code_to_id[code] = task.id
            index.id_to_code[task.id] = code
            index.id_to_task[task.id] = task
        return index

    def __len__(self) -> int:
        return len(self.code_to_id)

    def __contains__(self, code: object) -> bool:
        return code in self.code_to_id

    def entries(self) -> List[Tuple[str, TaskRef]]:
        """
        Return (code, task) pairs in index order.
        """
        return [
            (code, self.id_to_task[full_id])
            for code, full_id in self.code_to_id.items()
        ]

    def get_short_id(self, full_id: str) -> Optional[str]:
        """
        Return the short code issued for a long id.

        Parameters
        ----------
        full_id : str
            Long task identifier.

        Returns
        -------
        Optional[str]
            Short code, or None when the id is not indexed.
        """
        return self.id_to_code.get(full_id)

    def has_short_id(self, typed: str) -> bool:
        """
        Return True when the typed code matches a code exactly or by prefix.

        Examples
        --------
        >>> index = ShortIdIndex.build([TaskRef(id="ab")])
        >>> index.has_short_id("2E"), index.has_short_id("zz")
        (True, False)
        """
        lowered = typed.lower()
        if not lowered.strip():
            return False
        return lowered in self.code_to_id or any(
            code.startswith(lowered) for code in self.code_to_id
        )

    def content_for(self, full_id: str) -> str:
        """
        Return task content cleaned for display, or "Unknown task".
        """
        task = self.id_to_task.get(full_id)
        if task is None or not task.content:
            return UNKNOWN_TASK
        return clean_content_for_display(task.content) or UNKNOWN_TASK


@dataclass
class BatchResolution:
    """
    Outcome of resolving several typed codes against one index.

    Attributes
    ----------
    resolved : List[Tuple[str, str]]
        (typed code, long id) pairs, in request order.
    failures : List[Tuple[str, ShortIdError]]
        (typed code, error) pairs, in request order.
    """

    resolved: List[Tuple[str, str]] = field(default_factory=list)
    failures: List[Tuple[str, ShortIdError]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class PrefixResolver:
    """
    Resolve typed codes (exact or prefix) against a built index.

    Examples
    --------
    >>> index = ShortIdIndex.build([TaskRef(id="ab", content="Water plants")])
    >>> PrefixResolver(index).resolve("2e")
    'ab'
    """

    def __init__(self, index: ShortIdIndex):
        self.index = index

    def resolve(self, typed: str) -> str:
        """
        Resolve one typed code to its long identifier.

        Parameters
        ----------
        typed : str
            Exact short code, a prefix of one, or a full long id.

        Returns
        -------
        str
            Long task identifier.

        Raises
        ------
        TaskNotFoundError
            If nothing matches or the input is blank.
        AmbiguousIdError
            If the prefix matches several codes.
        """
        if not typed.strip():
            raise TaskNotFoundError(typed)
        lowered = typed.lower()
        exact = self.index.code_to_id.get(lowered)
        if exact is not None:
            return exact

        matches = [
            (code, full_id)
            for code, full_id in self.index.code_to_id.items()
            if code.startswith(lowered)
        ]
        if not matches:
            if typed in self.index.id_to_code:
                return typed
            raise TaskNotFoundError(typed)
        if len(matches) > 1:
            raise AmbiguousIdError(
                typed,
                [
                    Candidate(code=code, content=self.index.content_for(full_id))
                    for code, full_id in matches
                ],
            )
        return matches[0][1]

    def resolve_many(self, typed_codes: Iterable[str]) -> BatchResolution:
        """
        Resolve several codes, collecting failures instead of stopping.

        Examples
        --------
        >>> index = ShortIdIndex.build([TaskRef(id="a"), TaskRef(id="ab")])
        >>> batch = PrefixResolver(index).resolve_many(["2p", "zz", "2"])
        >>> batch.resolved
        [('2p', 'a')]
        >>> [type(error).__name__ for _, error in batch.failures]
        ['TaskNotFoundError', 'AmbiguousIdError']
        """
        batch = BatchResolution()
        for typed in typed_codes:
            try:
                batch.resolved.append((typed, self.resolve(typed)))
            except ShortIdError as exc:
                batch.failures.append((typed, exc))
        return batch
