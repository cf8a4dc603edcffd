#!/usr/bin/env python3
"""
attribution.py
-------------------
Caller attribution for temporary file names.

Every temporary file is named after the function that asked for it. The
call stack is walked outward from the file-creation entry point and the
first frame whose fully-qualified name is not in the skip registry wins.
Helpers that only forward requests register themselves with @skip_temp so
that the function calling *them* gets the credit.

Functions:
    frame_name: Fully-qualified name (module.qualname) of a frame
    code_names: Frame names a (possibly wrapped) function runs under
    current_stack: Active call stack as CallFrame records, innermost first
    attribute_caller: First non-skipped frame name, or UNKNOWN
    sanitize: Turn a label into a tempfile name template
    template_prefix: Validate a template and strip its placeholder run
    skip_temp: Decorator registering a function in a SkipRegistry

Usage:
    from temptrace.utils.attribution import skip_temp

    @skip_temp
    def make_scratch(tmp):
        return tmp.create_file(suffix=".txt")

    def build_report(tmp):
        fh = make_scratch(tmp)  # named build_report-XXXXXXXX.txt
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import inspect
import re
from dataclasses import dataclass
from types import FrameType
from typing import (
    Any,
    Callable,
    Container,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Union,
)

# --- Local imports ---
from temptrace.core.exceptions import AllocationError, RegistryError


UNKNOWN = "UNKNOWN"
PLACEHOLDER = "X"
MIN_PLACEHOLDER_LENGTH = 4
DEFAULT_PLACEHOLDER_LENGTH = 8

_SEPARATOR_RE = re.compile(r"::|\.")
_UNSAFE_RE = re.compile(r"[^\w\-]")
_TEMPLATE_RE = re.compile(rf"(.*?)({PLACEHOLDER}{{{MIN_PLACEHOLDER_LENGTH},}})", re.DOTALL)


# ═══════════════════════════════════════════════════════════════════════════
# CALL STACK
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CallFrame:
    """
    One frame of the active call stack.

    Attributes:
        name: Fully-qualified function name, empty for module-level code
        filename: Source file of the frame
        lineno: Line currently executing in the frame
    """

    name: str
    filename: str
    lineno: int


def qualified_name(func: Callable[..., Any]) -> str:
    """Return ``module.qualname`` for a function, unwrapping static/class methods."""
    func = getattr(func, "__func__", func)
    module = getattr(func, "__module__", None)
    qualname = getattr(func, "__qualname__", None) or getattr(func, "__name__", "")
    return f"{module}.{qualname}" if module else qualname


def code_names(func: Callable[..., Any]) -> List[str]:
    """
    Return the frame names ``func`` produces when called.

    ``functools.wraps`` copies ``__qualname__`` onto the wrapper, but the
    frame on the stack is named after the wrapper's code object. Walks the
    ``__wrapped__`` chain and names each function by its code and globals,
    the same way frame_name does.
    """
    names: List[str] = []
    seen = set()
    current: Any = getattr(func, "__func__", func)
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        code = getattr(current, "__code__", None)
        if code is not None:
            qualname = getattr(code, "co_qualname", code.co_name)
            module = getattr(current, "__globals__", {}).get("__name__")
            names.append(f"{module}.{qualname}" if module else qualname)
        current = getattr(current, "__wrapped__", None)
    return names


def frame_name(frame: FrameType) -> str:
    """
    Return the fully-qualified name of the function running in a frame.

    Module-level code (and exec'd strings) has no function, so its name is
    the empty string, which ends attribution.
    """
    code = frame.f_code
    qualname = getattr(code, "co_qualname", code.co_name)
    if qualname == "<module>":
        return ""
    module = frame.f_globals.get("__name__")
    return f"{module}.{qualname}" if module else qualname


def current_stack(skip: int = 0) -> List[CallFrame]:
    """
    Capture the active call stack, innermost frame first.

    Args:
        skip: Number of frames above the caller of current_stack to drop.
            ``skip=0`` starts at the function that called current_stack.

    Returns:
        List of CallFrame records
    """
    frame = inspect.currentframe()
    try:
        for _ in range(skip + 1):
            if frame is None:
                break
            frame = frame.f_back

        frames: List[CallFrame] = []
        while frame is not None:
            frames.append(
                CallFrame(
                    name=frame_name(frame),
                    filename=frame.f_code.co_filename,
                    lineno=frame.f_lineno,
                )
            )
            frame = frame.f_back
        return frames
    finally:
        del frame


def attribute_caller(frame_names: Iterable[str], skip_set: Container[str]) -> str:
    """
    Return the first frame name not present in the skip set.

    Walks outward (toward the original caller). An empty name or an
    exhausted stack yields UNKNOWN.

    Args:
        frame_names: Frame names, innermost first, starting above the
            file-creation entry point
        skip_set: Names to step over (usually a SkipRegistry)

    Returns:
        The attributed label
    """
    for name in frame_names:
        if not name:
            return UNKNOWN
        if name not in skip_set:
            return name
    return UNKNOWN


# ═══════════════════════════════════════════════════════════════════════════
# TEMPLATES
# ═══════════════════════════════════════════════════════════════════════════

def sanitize(label: str, placeholder_length: int = DEFAULT_PLACEHOLDER_LENGTH) -> str:
    """
    Convert a caller label into a unique-name template.

    Namespace separators (``::`` and ``.``) become ``-`` and anything that
    is not a word character or ``-`` is dropped, so ``pkg.f.<locals>.g``
    becomes ``pkg-f-locals-g``.

    Args:
        label: Caller label
        placeholder_length: Length of the trailing X run (at least 4)

    Returns:
        Template such as ``A-B-C-XXXXXXXX``

    Raises:
        ValueError: If placeholder_length is below the minimum

    Examples:
        >>> sanitize("A::B::C")
        'A-B-C-XXXXXXXX'
        >>> sanitize("", placeholder_length=4)
        'UNKNOWN-XXXX'
    """
    if placeholder_length < MIN_PLACEHOLDER_LENGTH:
        raise ValueError(
            f"placeholder_length must be at least {MIN_PLACEHOLDER_LENGTH}, "
            f"got {placeholder_length}"
        )
    name = _UNSAFE_RE.sub("", _SEPARATOR_RE.sub("-", label or ""))
    return f"{name or UNKNOWN}-{PLACEHOLDER * placeholder_length}"


def template_prefix(template: str) -> str:
    """
    Validate a template and return the text before its placeholder run.

    The random part of the name is produced by ``tempfile``; the X run only
    marks where it goes.

    Raises:
        AllocationError: If the template does not end with at least XXXX
    """
    match = _TEMPLATE_RE.fullmatch(template or "")
    if match is None:
        raise AllocationError(
            f"Template must end with at least {PLACEHOLDER * MIN_PLACEHOLDER_LENGTH}: "
            f"{template!r}"
        )
    return match.group(1)


# ═══════════════════════════════════════════════════════════════════════════
# SKIP REGISTRY
# ═══════════════════════════════════════════════════════════════════════════

class SkipRegistry(Mapping[str, Any]):
    """
    Registry of fully-qualified function names skipped during attribution.

    Maps each name to the tag it was registered with. Populated while
    modules are imported; call freeze() once initialization is over to
    reject late registrations.
    """

    def __init__(self, entries: Optional[Mapping[str, Any]] = None) -> None:
        self._entries: Dict[str, Any] = dict(entries or {})
        self._frozen = False

    def register(self, target: Union[str, Callable[..., Any]], tag: Any = None) -> str:
        """
        Add a function (or an explicit qualified name) to the registry.

        For a function object, the names of the code objects that run when
        it is called are registered too: the function itself and every
        function along its ``__wrapped__`` chain. A helper decorated with
        a ``functools.wraps`` decorator is therefore skipped in both its
        wrapper frame and its own frame. The wrapper's code name
        (``deco.<locals>.wrapper``) is shared by every function that
        decorator wraps, so those are skipped as well.

        Args:
            target: Function object or ``module.qualname`` string
            tag: Arbitrary value stored with the name

        Returns:
            The registered name

        Raises:
            RegistryError: If the registry is frozen
        """
        name = target if isinstance(target, str) else qualified_name(target)
        if self._frozen:
            raise RegistryError(f"Registry is frozen: cannot register {name!r}")
        self._entries[name] = tag
        if not isinstance(target, str):
            for alias in code_names(target):
                self._entries.setdefault(alias, tag)
        return name

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __getitem__(self, name: str) -> Any:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "open"
        return f"SkipRegistry({len(self._entries)} names, {state})"


DEFAULT_REGISTRY = SkipRegistry()


def skip_temp(
    func: Optional[Callable[..., Any]] = None,
    *,
    tag: Any = None,
    registry: Optional[SkipRegistry] = None,
) -> Any:
    """
    Mark a function as a temp-file helper to skip during attribution.

    Can be used bare or with arguments:

        @skip_temp
        def helper(tmp): ...

        @skip_temp(tag="fixtures", registry=my_registry)
        def other_helper(tmp): ...

    The function is returned unchanged; only its name is recorded.

    Args:
        func: Function being decorated (bare form)
        tag: Value stored with the registered name
        registry: Target registry (default: DEFAULT_REGISTRY)
    """
    target = registry if registry is not None else DEFAULT_REGISTRY

    def decorator(f: Callable[..., Any]) -> Callable[..., Any]:
        target.register(f, tag)
        return f

    if func is not None:
        return decorator(func)
    return decorator
