r"""
Argweave argument model: storage tags and the three argument kinds.

Overview
- Storage
  • Owned: value slot allocated and held by the argument itself.
  • BoundTo: write-through slot on caller-owned storage (an attribute, a
    mapping key, or a mutable sequence for multi-value arguments). The
    argument never replaces or clears the caller's container.

- Kinds
  • Flag: presence-only switch; setting it flips it to the negation of its default.
  • String: value-bearing argument, values kept verbatim.
  • Int: value-bearing argument, values parsed as strict decimal integers.
  String and Int share the Parametric state machine (set / default / stored).

- Capabilities (used by the parser's resolver)
  • set_value(raw), is_correct(), is_positional(), is_multi_value(),
    values_count(), default_value(), get_value(index).

- Builder modifiers (return the argument so calls chain)
  • positional(), default(value), multi_value(count=0), bind_storage(target, key).
  All modifiers raise ConfigurationError once the owning parser started parsing.

Cardinality and defaults
- default() takes the shape selected by the declared cardinality: a scalar for
  single-value arguments, a sequence for multi-value ones. Configure
  multi_value() first; a scalar default or scalar binding cannot be turned into
  a multi-value one afterwards.
- values_count() is 0 for flags, 1 for single-value arguments, the configured
  minimum for multi-value ones, or math.inf when the minimum is 0 (greedy).

Quick example:
    >>> from argweave.arguments import String, Int
    >>> files = String("-i", "--input", descr="input files").multi_value(1)
    >>> files.set_value("a.txt")
    >>> files.get_value(0), files.is_correct()
    ('a.txt', True)
    >>> Int("--jobs").default(4).get_value()
    4

Public API
- Storage: Owned, BoundTo
- Kinds: Argument, Flag, String, Int
"""
import functools
import math
import operator
import re
from collections.abc import MutableMapping, MutableSequence, Sequence

from rich.text import Text

from .faults import ConfigurationError, IndexOutOfRangeError, ValueParseError, FaultCode
from .utils import *


class Owned:
    """
    Value slot owned by the argument.

    Scalars live in the slot directly; multi-value arguments start with an
    empty list and append to it.
    """
    __slots__ = ("_value",)

    owned = True

    def __init__(self, value=Unset, /):
        self._value = value

    def get(self):
        return self._value

    def set(self, value, /):
        self._value = value

    def append(self, value, /):
        self._value.append(value)

    def __repr__(self):
        return "Owned(%r)" % (self._value,)


class BoundTo:
    """
    Write-through slot on storage that belongs to the caller.

    Forms
    - BoundTo(target, key): scalar slot. Mappings are written with
      target[key] = value, any other object with setattr(target, key, value).
    - BoundTo(sequence): sequence slot. Values are appended in place.

    The caller keeps ownership: nothing here copies, clears or replaces the
    target, and the target may outlive the parser.
    """
    __slots__ = ("_target", "_key")

    owned = False

    def __init__(self, target, key=Unset, /):
        if key is Unset and not isinstance(target, MutableSequence):
            raise TypeError("BoundTo() sequence form requires a mutable sequence")
        if key is not Unset and not isinstance(target, MutableMapping) and not isinstance(key, str):
            raise TypeError("BoundTo() attribute form requires a string key")
        self._target = target
        self._key = key

    @property
    def sequence(self):
        return self._key is Unset

    def get(self):
        if self._key is Unset:
            return self._target
        if isinstance(self._target, MutableMapping):
            return self._target.get(self._key, Unset)
        return getattr(self._target, self._key, Unset)

    def set(self, value, /):
        if isinstance(self._target, MutableMapping):
            self._target[self._key] = value
        else:
            setattr(self._target, self._key, value)

    def append(self, value, /):
        self._target.append(value)

    def __repr__(self):
        if self._key is Unset:
            return "BoundTo(<%s>)" % type(self._target).__name__
        return "BoundTo(<%s>, %r)" % (type(self._target).__name__, self._key)


class ArgumentType(type):
    """
    Metaclass giving argument kinds a stable identity and representation.

    Responsibilities
    - __typename__: class name split on capitals and lowercased ("flag",
      "string", "int"); used in messages and help output.
    - Read-only properties (via mirror) for every name in __introspectable__.
    - __repr__ / __rich_repr__ listing __displayable__ (or __introspectable__).
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise representation, e.g. flag(short='v', name='verbose', ...).
            """
            return "%s(%s)" % (
                type(self).__typename__,
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__())),
            )
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, value) pairs for pretty printers.
            """
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_names(cls, names, /):
    r"""
    Internal: split shell-style names into (short, name).

    Accepted forms
    - short: "-x" (one Unicode letter or digit), at most once.
    - long:  "--name" / "--long-name", exactly once. Segments start with a
      letter and are separated by single hyphens; underscores are rejected.

    Returns
    - (short, name) with prefixes removed; short is None when absent.

    Raises
    - TypeError when a name is not a string.
    - ConfigurationError for empty, malformed, repeated or missing names.
    """
    short = name = None
    for candidate in names:
        if not isinstance(candidate, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        elif not (candidate := candidate.strip()):
            raise ConfigurationError(f"{cls.__typename__} names cannot be empty-strings")

        if re.fullmatch(r"-[^\W_]", candidate):
            if short is not None:
                raise ConfigurationError(f"{cls.__typename__} can have at most one short name")
            short = candidate[1:]
        elif re.fullmatch(r"--[^\W\d_](-?[^\W_]+)*", candidate):
            if name is not None:
                raise ConfigurationError(f"{cls.__typename__} can have only one long name")
            name = candidate[2:]
        else:
            raise ConfigurationError(
                f"{cls.__typename__} name {candidate!r} must be a valid shell-style name (e.g. '-v' or '--verbose')"
            )

    if name is None:
        raise ConfigurationError(f"{cls.__typename__} must specify a long name (e.g. '--verbose')")
    return short, name


def _sanitize_descr(cls, descr, /):
    """
    Internal: normalize a description. Unset and blank strings become None.
    """
    if not isinstance(descr, str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    if isinstance(descr, str):
        descr = descr.strip() or Unset
    return coalesce(descr)


def _is_integer(value):
    return isinstance(value, int) and not isinstance(value, bool)


class Argument(metaclass=ArgumentType):
    """
    Base of the argument kinds.

    Holds identity (short, name, descr), one storage tag, the configured
    default and the runtime "set" status. Concrete kinds implement the
    capability methods used by the parser.
    """

    __introspectable__ = (
        "short",
        "name",
        "descr",
    )

    __displayable__ = (
        "short",
        "name",
        "descr",
        "is_set",
        "has_default",
    )

    def __init__(self, *names, descr=Unset):
        self._short, self._name = _sanitize_names(type(self), names)
        self._descr = _sanitize_descr(type(self), descr)
        self._default = Unset
        self._storage = Owned()
        self._set = False
        self._frozen = False

    @property
    def is_set(self):
        """True once at least one value was written by parsing."""
        return self._set

    @property
    def has_default(self):
        return self._default is not Unset

    @property
    def owned(self):
        """False when values are written to caller-owned storage."""
        return self._storage.owned

    def set_value(self, value="", /):
        raise NotImplementedError

    def is_correct(self):
        raise NotImplementedError

    def is_positional(self):
        return False

    def is_multi_value(self):
        return False

    def values_count(self):
        return 1

    def default_value(self):
        return ""

    def get_value(self, index=0, /):
        raise NotImplementedError

    def _configure(self):
        # modifiers are only legal while the parser has not started parsing
        if self._frozen:
            raise ConfigurationError(
                f"{type(self).__typename__} {self._name!r} cannot be modified once parsing has started"
            )

    def _freeze(self):
        self._frozen = True


class Flag(Argument):
    """
    Presence-only switch.

    A flag always has a default (False unless configured). Setting it, with or
    without a value, stores the negation of that default; a flag is always
    correct and never positional.
    """

    def __init__(self, *names, descr=Unset):
        super().__init__(*names, descr=descr)
        self._default = False

    def set_value(self, value="", /):
        # the raw value is ignored: presence is the signal
        self._storage.set(not self._default)
        self._set = True

    def is_correct(self):
        return True

    def values_count(self):
        return 0

    def default_value(self):
        return "true" if self._default else "false"

    def get_value(self, index=0, /):
        if self._set:
            return self._storage.get()
        return self._default

    def default(self, value, /):
        self._configure()
        if not isinstance(value, bool):
            raise ConfigurationError(f"flag {self._name!r} default must be a boolean")
        self._default = value
        return self

    def bind_storage(self, target, key=Unset, /):
        """
        Write the flag into caller storage: an attribute or a mapping key.
        """
        self._configure()
        if key is Unset:
            raise ConfigurationError(f"flag {self._name!r} must be bound to a (target, key) slot")
        self._storage = BoundTo(target, key)
        return self


class Parametric(Argument):
    """
    Value-bearing state machine shared by String and Int.

    States
    - unset, no default  → incorrect (single-value) / length-checked (multi-value)
    - unset, default     → reads come from the default
    - set                → reads come from storage (owned or bound)

    Subclasses provide _convert(raw) and the scalar type accepted by default().
    """

    __introspectable__ = (
        "short",
        "name",
        "descr",
        "minimum",
    )

    __displayable__ = (
        "short",
        "name",
        "descr",
        "minimum",
        "is_set",
        "has_default",
    )

    __scalar__ = "value"

    def __init__(self, *names, descr=Unset):
        super().__init__(*names, descr=descr)
        self._positional = False
        self._multi = False
        self._minimum = 0

    def _convert(self, value, /):
        raise NotImplementedError

    def _accepts(self, value, /):
        raise NotImplementedError

    def _values(self):
        """
        Effective sequence of a multi-value argument.

        Parsed values win; the default is used only while nothing was parsed.
        """
        if self._set or self._default is Unset:
            return self._storage.get()
        return self._default

    def set_value(self, value, /):
        value = self._convert(value)
        if self._multi:
            self._storage.append(value)
        else:
            self._storage.set(value)
        self._set = True

    def is_correct(self):
        if self._multi:
            return not self._minimum or len(self._values()) >= self._minimum
        return self._set or self._default is not Unset

    def is_positional(self):
        return self._positional

    def is_multi_value(self):
        return self._multi

    def values_count(self):
        if self._multi:
            return self._minimum or math.inf
        return 1

    def default_value(self):
        if self._default is Unset:
            return ""
        if self._multi:
            return " ".join(map(str, self._default))
        return str(self._default)

    def get_value(self, index=0, /):
        """
        Return the value at `index`: parsed values first, then the default.

        Single-value arguments only answer index 0.

        Raises
        - IndexOutOfRangeError when neither source has an entry at `index`.
        """
        if not _is_integer(index):
            raise TypeError(f"{type(self).__typename__} index must be an integer")

        if self._multi:
            values = self._values()
            if 0 <= index < len(values):
                return values[index]
        elif index == 0:
            value = self._storage.get() if self._set else self._default
            if value is not Unset:
                return value

        raise IndexOutOfRangeError(f"{type(self).__typename__} {self._name!r} has no value at index {index}")

    def positional(self):
        self._configure()
        self._positional = True
        return self

    def default(self, value, /):
        """
        Configure the default; its shape must match the declared cardinality.

        - single-value: one scalar of the argument's kind
        - multi-value:  a sequence (not a string) of such scalars
        """
        self._configure()
        kind = type(self).__scalar__
        if self._multi:
            if isinstance(value, str | bytes) or not isinstance(value, Sequence):
                raise ConfigurationError(
                    f"multi-value {type(self).__typename__} {self._name!r} requires a sequence default"
                )
            if not all(map(self._accepts, value)):
                raise ConfigurationError(
                    f"multi-value {type(self).__typename__} {self._name!r} default must only contain {kind}s"
                )
            self._default = list(value)
        else:
            if not self._accepts(value):
                raise ConfigurationError(
                    f"single-value {type(self).__typename__} {self._name!r} requires a single {kind} default"
                )
            self._default = value
        return self

    def multi_value(self, count=0, /):
        """
        Accept several values per occurrence.

        count is the minimum number of values required after parsing; 0 means
        no minimum, and the resolver then consumes greedily.
        """
        self._configure()
        if not _is_integer(count) or count < 0:
            raise ConfigurationError(f"{type(self).__typename__} 'count' must be a non-negative integer")
        if not self._multi:
            if self._default is not Unset:
                raise ConfigurationError(
                    f"{type(self).__typename__} {self._name!r} already has a single default; call multi_value() first"
                )
            if not self._storage.owned:
                raise ConfigurationError(
                    f"{type(self).__typename__} {self._name!r} is already bound to single storage; call multi_value() first"
                )
            self._storage = Owned([])
        self._multi = True
        self._minimum = count
        return self

    def bind_storage(self, target, key=Unset, /):
        """
        Write values into caller storage instead of an owned slot.

        - multi-value:  bind_storage(sequence), values are appended in place
        - single-value: bind_storage(target, key), an attribute or mapping key
        """
        self._configure()
        if self._multi:
            if key is not Unset or not isinstance(target, MutableSequence):
                raise ConfigurationError(
                    f"multi-value {type(self).__typename__} {self._name!r} must be bound to a mutable sequence"
                )
        elif key is Unset:
            raise ConfigurationError(
                f"single-value {type(self).__typename__} {self._name!r} must be bound to a (target, key) slot"
            )
        self._storage = BoundTo(target, key)
        return self


class String(Parametric):
    """
    String argument; raw tokens are stored unchanged.
    """

    __scalar__ = "string"

    def _convert(self, value, /):
        return value

    def _accepts(self, value, /):
        return isinstance(value, str)


class Int(Parametric):
    """
    Integer argument; raw tokens must be decimal literals such as 42, +7 or -3.
    """

    __scalar__ = "integer"

    def _convert(self, value, /):
        if not isinstance(value, str) or not re.fullmatch(r"[+-]?[0-9]+", value):
            raise ValueParseError(
                "malformed integer %r for int %r" % (value, self._name),
                title="malformed integer",
                code=FaultCode.MALFORMED_INTEGER,
                input=value,
                argument=self,
                hint="pass a decimal integer (for example: --%s=42)" % self._name,
            )
        return int(value)

    def _accepts(self, value, /):
        return _is_integer(value)


__all__ = (
    # Storage tags
    "Owned",
    "BoundTo",

    # Kinds
    "Argument",
    "Flag",
    "String",
    "Int",
)

# The metaclass is an implementation detail of the kinds above.
del ArgumentType
