r"""
Clasp argument specifications and storage bindings.

Overview
- Bindings
  • Binding: a live reference to caller-owned storage of exactly one Kind. It
    points at an attribute of an object, or at an item when the target is a
    mutable mapping. The binding never owns the storage; it only reads and
    writes through it.
  • Variable: a small typed cell for callers without a natural storage object;
    Variable(Kind.INT).binding is a Binding to its "value" attribute.

- Specs
  • Argument: one named argument of a command (name, short alias, help text,
    default value kept as text, binding, required flag) plus the transient
    "supplied" marker of the current parse cycle.

- Introspection & representation
  • ArgumentType metaclass provides stable __repr__/__rich_repr__ and exposes selected
    fields via read-only properties declared in __introspectable__/__displayable__.

Validation highlights
- Names and aliases must be non-empty, must not start with '-' and cannot
  contain '=' or blanks (the parser could never match them otherwise).
- An argument's name and alias must differ.
- The default value must be a valid value of the binding's kind; it is
  formatted to text right away, so an invalid default fails at registration.

Example
    >>> threads = Variable(Kind.INT)
    >>> spec = Argument("threads", "t", threads.binding, 4, help="worker count")
    >>> spec.default
    '4'
"""
import functools
import operator
import re
from collections.abc import MutableMapping

from . import coercion
from .coercion import Kind
from .utils import *


class ArgumentType(type):
    """
    Metaclass that turns specs into introspectable, read-only records.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and help output.
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
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
                # explicit properties (e.g. a settable value) win over mirrors
                name: mirror(name) for name in namespace.get("__introspectable__", ()) if name not in namespace
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - argument(name='threads', alias='t', default='4', ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield a sequence of (name, object) pairs for pretty printers.
            """
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


class Binding(metaclass=ArgumentType):
    """
    Live reference to caller-owned storage of one Kind.

    The storage is the attribute 'key' of 'target' or, when 'target' is a
    mutable mapping, its item 'key'. Reads and writes go straight through, so
    the caller observes every value the parser assigns.
    """

    __introspectable__ = (
        "kind",
        "target",
        "key",
    )

    def __new__(cls, kind, target, key, /):
        if not isinstance(kind, Kind):
            raise TypeError(f"{cls.__typename__} 'kind' must be a kind")
        if not isinstance(target, MutableMapping) and not isinstance(key, str):
            raise TypeError(f"{cls.__typename__} 'key' must be a string for attribute targets")
        if isinstance(key, str) and not isinstance(target, MutableMapping) and not key.isidentifier():
            raise ValueError(f"{cls.__typename__} 'key' must be a valid attribute name")

        self = super().__new__(cls)
        self._kind = kind
        self._target = target
        self._key = key
        return self

    @classmethod
    def of(cls, kind, target, key, /):
        """
        Build a binding, accepting the kind by name (e.g. "uint64") as well.
        """
        if isinstance(kind, str):
            try:
                kind = Kind(kind)
            except ValueError:
                raise ValueError(f"{cls.__typename__} unknown kind {kind!r}") from None
        return cls(kind, target, key)

    def get(self):
        if isinstance(self._target, MutableMapping):
            return self._target[self._key]
        return getattr(self._target, self._key)

    def set(self, value, /):
        if isinstance(self._target, MutableMapping):
            self._target[self._key] = value
        else:
            setattr(self._target, self._key, value)


class Variable(metaclass=ArgumentType):
    """
    Typed storage cell owned by the caller.

    Starts at the kind's zero value (0, 0.0, False or "") unless an initial
    value is given.
    """

    __introspectable__ = (
        "kind",
        "value",
    )

    def __new__(cls, kind, value=Unset, /):
        if not isinstance(kind, Kind):
            raise TypeError(f"{cls.__typename__} 'kind' must be a kind")
        self = super().__new__(cls)
        self._kind = kind
        self._value = coalesce(value, kind.type())
        return self

    @property
    def value(self):
        return self._value

    @value.setter
    def value(self, value):
        self._value = value

    @property
    def binding(self):
        return Binding(self._kind, self, "value")


_NAME = re.compile(r"[^\s=-][^\s=]*")


def _sanitize_name(cls, field, name, /):
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} {field!r} must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} {field!r} cannot be empty")
    elif not _NAME.fullmatch(name):
        raise ValueError(f"{cls.__typename__} {field!r} cannot start with '-' or contain '=' or blanks")
    return name


class Argument(metaclass=ArgumentType):
    """
    Named argument specification.

    Argument declares one named argument of a command: how it is spelled
    (name and short alias, each accepted with one or two leading dashes), what
    storage it writes to (binding), its default (kept as text so it can be
    restored on every reset), and whether it must be supplied in each cycle.

    Properties
    - The names listed in __introspectable__ are exposed as read-only attributes.
    - supplied: True once the argument was matched in the current parse cycle.
    """

    __introspectable__ = (
        "name",
        "alias",
        "help",
        "default",
        "binding",
        "required",
        "supplied",
    )

    __displayable__ = (
        "name",
        "alias",
        "default",
        "required",
    )

    def __new__(cls, name, alias, binding, default, /, required=False, help=Unset):
        """
        Construct an Argument spec.

        Parameters
        - name: str
          Canonical name, matched as '-name' or '--name'.
        - alias: str | None
          Short form resolving to the same spec; None when there is none.
        - binding: Binding
          Caller-owned destination of parsed values.
        - default: value of the binding's kind
          Formatted to text (see coercion.format) and used to initialize and
          reset the destination.
        - required: bool
          Whether every parse cycle must supply the argument.
        - help: Unset | str
          Help text; None when Unset.

        Raises
        - TypeError/ValueError on malformed names, a non-binding destination,
          or a default that is not a valid value of the binding's kind.
        """
        name = _sanitize_name(cls, "name", name)
        if alias is not None:
            alias = _sanitize_name(cls, "alias", alias)
            if alias == name:
                raise ValueError(f"{cls.__typename__} 'alias' must differ from 'name'")

        if not isinstance(binding, Binding):
            raise TypeError(f"{cls.__typename__} 'binding' must be a binding")

        if not isinstance(help, str | Unset):
            raise TypeError(f"{cls.__typename__} 'help' must be a string")

        self = super().__new__(cls)
        self._name = name
        self._alias = alias
        self._help = coalesce(help)
        self._default = coercion.format(binding.kind, default)
        self._binding = binding
        self._required = bool(required)
        self._supplied = False
        return self

    @property
    def kind(self):
        return self._binding.kind

    @property
    def names(self):
        """
        every spelling (without dashes) this spec answers to.
        """
        return (self._name,) if self._alias is None else (self._name, self._alias)

    def assign(self, text, /):
        """
        Coerce a token and write it through the binding, marking the spec supplied.

        Raises CoercionError and leaves the destination untouched when the
        token is not a valid value of the binding's kind.
        """
        self._binding.set(coercion.parse(self.kind, text))
        self._supplied = True

    def restore(self):
        """
        Write the default value through the binding.
        """
        self._binding.set(coercion.parse(self.kind, self._default))

    def reset(self):
        """
        Prepare for a fresh parse cycle.

        Clears 'supplied'; optional arguments get their default back, required
        ones keep whatever the last cycle wrote.
        """
        self._supplied = False
        if not self._required:
            self.restore()


__all__ = (
    "Binding",
    "Variable",
    "Argument",
    "Kind",
)

# the metaclass is an implementation detail of the records above; keep it out of the module namespace.
del ArgumentType
