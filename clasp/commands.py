"""
Clasp command layer: declare, parse and reset command-line arguments.

What this module provides
- Command: a named node of a command tree that owns
  • an ordered list of named Argument specs (plus a lookup by name and alias),
  • a mapping of sub-commands (children), each a Command of its own,
  • the positional tokens collected during the current parse cycle,
  • the transient help-requested / parsed state.

Core ideas
- Caller-owned storage: every named argument writes through a Binding into the
  caller's own objects, so there is no namespace to unpack after parsing.
- Repeatable cycles: a Command tree is built once and then parsed many times;
  reset() restores it (optional arguments back to their defaults, positionals
  cleared, recursively) between cycles.
- Friendly diagnostics: every failure is a CommandException carrying a stable
  FaultCode, a lowercased message, a hint and the command chain traversed.

Quick start
    from clasp import Command, Variable, Kind

    count = Variable(Kind.INT)
    verbose = Variable(Kind.BOOL)

    tool = Command("tool", "Count things.")
    tool.argument("count", "c", count.binding, 1)
    tool.argument("verbose", "v", verbose.binding, False)

    tool.parse(["-c", "3", "--verbose", "things.txt"])  # -> ("tool",)
    count.value, verbose.value, tool.positionals       # -> 3, True, ("things.txt",)
    tool.reset()

Token grammar (named arguments)
- '-name value' | '--name value' | '-name=value' | '--name=value'
- bool arguments may omit the value ('-v'); a following token is consumed as
  the value only when it is a boolean literal ('-v false').
- any token that does not start with '-' is positional; a leading token that
  names a sub-command hands the rest of the line over to that sub-command.

See also
- clasp.arguments for specs and bindings.
- clasp.faults for fault codes and rendering behavior.
"""
import difflib
import functools
import operator
import re
from collections import defaultdict

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from . import coercion
from .arguments import Argument, Binding
from .coercion import Kind
from .faults import *
from .utils import *


class CommandType(type):
    """
    Metaclass providing introspection plumbing for Command.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ for diagnostics and rich UI.
    - Expose selected fields as read-only properties using mirror() for all names
      listed in __introspectable__.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      for consistent, human-friendly labels in messages.
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
                name: mirror(name) for name in namespace.get("__introspectable__", ()) if name not in namespace
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - command(name='build', description='...', ...)
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


def _shorthand(kind):
    """
    Build a typed registration method (add_int, add_bool, ...) for one kind.

    The generated method builds Binding(kind, target, key) and forwards to
    Command.argument, so callers can register against an attribute (or mapping
    item) without constructing the binding themselves.
    """

    @rename("add_" + kind.value)
    def method(self, name, alias, target, key, default, /, required=False, help=Unset):
        return self.argument(name, alias, Binding(kind, target, key), default, required, help)

    method.__doc__ = f"""
        Register a {kind.value} argument bound to target.key (or target[key] for mappings).

        Returns the registered Argument; see Command.argument for the contract.
    """
    return method


class Command(metaclass=CommandType):
    """
    Declarative command node: named arguments, sub-commands and positionals.

    Responsibilities
    - Registration: argument(...) / add_<kind>(...) register named arguments;
      add(...) / command(...) attach sub-commands. Collisions are rejected.
    - Parsing: parse(tokens) binds named values, collects positionals, recurses
      into sub-commands and validates required arguments.
    - Lifecycle: reset() makes the whole tree ready for the next parse cycle.
    - Rendering: help(...) prints a rich usage screen.

    Lifecycle
    - Constructed once with an implicit 'help'/'h' bool argument bound to the
      command's own help_requested state.
    - Parsed zero or more times; reset between cycles.

    Notes
    - Containers are exposed as snapshots (tuples/dicts); mutate through the
      registration API only.
    - A Command tree is not thread-safe: serialize parse/reset calls on it.
    """

    __introspectable__ = (
        "name",
        "description",
        "arguments",
        "lookup",
        "children",
        "parent",
        "positionals",
        "help_requested",
        "parsed",
    )

    __displayable__ = (
        "name",
        "description",
        "arguments",
        "children",
        "positionals",
    )

    @property
    def root(self):
        """
        Return the topmost command in the current command hierarchy.
        """
        child, parent = self, self._parent
        while parent:
            child, parent = parent, parent._parent
        return child

    @property
    def path(self):
        """
        Return the full ancestry from root to this command as a tuple.
        """
        path = [command := self]
        while command._parent:
            path.append(command := command._parent)
        return tuple(reversed(path))

    def __new__(cls, name, description=Unset, /):
        """
        Construct a Command.

        Parameters
        - name: str
          Command (or sub-command) name; a plain word that does not start with '-'.
        - description: Unset | str
          One-line (or multi-line) description shown in help; "" when Unset.

        Raises
        - TypeError/ValueError on malformed name or description.
        """
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
        elif name.startswith("-") or any(char.isspace() for char in name):
            raise ValueError(f"{cls.__typename__} 'name' cannot start with '-' or contain blanks")

        if not isinstance(description, str | Unset):
            raise TypeError(f"{cls.__typename__} 'description' must be a string")

        self = super().__new__(cls)
        self._name = name
        self._description = coalesce(description, "")
        self._arguments = []
        self._lookup = {}
        self._children = {}
        self._parent = None
        self._positionals = []
        self._help_requested = False
        self._parsed = False

        self.add_bool("help", "h", self, "_help_requested", False, help=f"Print '{name}' usage information.")
        return self

    # ── Registration ────────────────────────────────────────────────────────

    def argument(self, name, alias, binding, default, /, required=False, help=Unset):
        """
        Register a named argument and initialize its destination.

        Parameters
        - name, alias: str (alias may be None)
          Spellings matched after stripping one or two leading dashes.
        - binding: Binding
          Caller-owned destination.
        - default: value of the binding's kind
          Written through the binding right away and restored by reset()
          (unless the argument is required).
        - required: bool
          Whether each parse cycle must supply the argument.
        - help: Unset | str
          Help text.

        Raises
        - DuplicateArgumentError: name or alias already registered on this command.
        - TypeError/ValueError: malformed spec (see Argument).

        Returns
        - Argument: the registered spec.
        """
        argument = Argument(name, alias, binding, default, required, help)

        for spelling in argument.names:
            if spelling in self._lookup:
                route = " ".join(step.name for step in self.path)
                raise DuplicateArgumentError(
                    "argument name %r is already registered with command %r" % (spelling, route),
                    title="duplicate argument",
                    code=FaultCode.DUPLICATE_ARGUMENT,
                    hint="pick another name or alias for %r" % argument.name,
                    command=self,
                    input=spelling,
                    argument=argument,
                    docs=getdoc(FaultCode.DUPLICATE_ARGUMENT),
                )

        argument.restore()
        self._arguments.append(argument)
        self._lookup.update(dict.fromkeys(argument.names, argument))
        return argument

    add_int = _shorthand(Kind.INT)
    add_int64 = _shorthand(Kind.INT64)
    add_uint = _shorthand(Kind.UINT)
    add_uint64 = _shorthand(Kind.UINT64)
    add_float64 = _shorthand(Kind.FLOAT64)
    add_bool = _shorthand(Kind.BOOL)
    add_string = _shorthand(Kind.STRING)

    def add(self, child, /):
        """
        Attach an existing command as a sub-command.

        Rules
        - child must be a Command that is not attached anywhere yet and is not
          the root of this tree (the tree stays acyclic).
        - child's name must be free among this command's children.

        Raises
        - TypeError: child is not a Command.
        - ValueError: child is already attached or would create a cycle.
        - DuplicateCommandError: a sub-command with that name is registered.

        Returns
        - The attached child (handy for chaining registrations).
        """
        if not isinstance(child, Command):
            raise TypeError(f"{type(self).__typename__} sub-command must be a command")
        if child._parent is not None:
            raise ValueError(f"{type(self).__typename__} {child.name!r} is already attached to {child._parent.name!r}")
        if child is self.root:
            raise ValueError(f"{type(self).__typename__} {child.name!r} cannot be attached below itself")

        if child.name in self._children:
            route = " ".join(step.name for step in self.path)
            raise DuplicateCommandError(
                "sub-command with name %r already registered with %r" % (child.name, route),
                title="duplicate sub-command",
                code=FaultCode.DUPLICATE_COMMAND,
                hint="rename one of the %r sub-commands" % child.name,
                command=self,
                input=child.name,
                docs=getdoc(FaultCode.DUPLICATE_COMMAND),
            )

        self._children[child.name] = child
        child._parent = self
        return child

    def command(self, name, description=Unset, /):
        """
        Create a sub-command and attach it in one step.
        """
        return self.add(Command(name, description))

    # ── Parsing ─────────────────────────────────────────────────────────────

    def parse(self, tokens, /):
        """
        Parse one cycle of tokens (the line without the command name itself).

        Returns
        - tuple[str, ...]: names of the commands traversed, root first and the
          innermost sub-command last.

        Raises
        - TypeError: tokens is not an iterable of strings.
        - UnknownArgumentError, MissingArgumentNameError, MissingValueError,
          InvalidValueError, RequiredArgumentError: see _parseargs. Every fault
          carries the traversed chain in its options ('chain').

        Notes
        - Bindings and positionals written before a failure stay written;
          call reset() before retrying.
        """
        if isinstance(tokens, str):
            raise TypeError("parse() argument must be an iterable of strings, not a string")
        tokens = list(tokens)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("parse() argument must be an iterable of strings")
        return self._parseargs(tokens, ())

    def _resolve(self, key, token, chain):
        """
        find the spec a stripped key refers to, or fail with a suggestion.
        """
        try:
            return self._lookup[key]
        except KeyError:
            pass

        route = " ".join(chain)
        suggestions = difflib.get_close_matches(key, self._lookup.keys(), 5)
        try:
            hint = "did you mean %r? you can also run '%s --help' to see all arguments" % (
                "--" + suggestions[0] if len(suggestions[0]) > 1 else "-" + suggestions[0],
                route,
            )
        except IndexError:
            hint = "run '%s --help' to see all available arguments" % route
        raise UnknownArgumentError(
            "unknown argument %r" % key,
            title="unknown argument",
            code=FaultCode.UNKNOWN_ARGUMENT,
            hint=hint,
            chain=chain,
            input=token,
            suggestions=suggestions,
            docs=getdoc(FaultCode.UNKNOWN_ARGUMENT),
        )

    def _parseargs(self, tokens, prefix):
        """
        parse tokens for this command; 'prefix' is the chain of ancestors.

        phases
        - routing: a first token naming a child hands everything else to it.
        - scanning: '-'-led tokens are named arguments, the rest are positionals.
          • '=' splits an inline value; '=' right after the dashes is an error.
          • without '=', bool specs peek for a boolean literal, others take the
            next token unconditionally.
          • values are coerced and written through the spec's binding.
        - validation: unless help was requested, the first required spec (in
          registration order) that was not supplied fails the cycle.
        """
        chain = prefix + (self._name,)

        if tokens and tokens[0] in self._children:
            return self._children[tokens[0]]._parseargs(tokens[1:], chain)

        route = " ".join(chain)
        index = 0
        while index < len(tokens):
            token = tokens[index]
            index += 1

            if not token.startswith("-"):
                self._positionals.append(token)
                continue

            # both '-name' and '--name' spell the same argument
            stripped = token[1:]
            if stripped.startswith("-"):
                stripped = stripped[1:]

            key, separator, value = stripped.partition("=")

            if separator and not key:
                raise MissingArgumentNameError(
                    "probably missing an argument name in %r" % token,
                    title="missing argument name",
                    code=FaultCode.MISSING_ARGUMENT_NAME,
                    hint="write the name before '=' (for example: --name=value)",
                    chain=chain,
                    input=token,
                    docs=getdoc(FaultCode.MISSING_ARGUMENT_NAME),
                )

            argument = self._resolve(key, token, chain)

            if not separator:
                if argument.kind is Kind.BOOL:
                    # a bare flag means true; only a boolean literal is taken as its value
                    if index < len(tokens) and coercion.is_bool(tokens[index]):
                        value = tokens[index]
                        index += 1
                    else:
                        value = "true"
                elif index < len(tokens):
                    value = tokens[index]
                    index += 1
                else:
                    raise MissingValueError(
                        "missing value for argument %r" % key,
                        title="missing value",
                        code=FaultCode.MISSING_VALUE,
                        hint="pass a value after a space or inline (for example: %s=<value>)" % token,
                        chain=chain,
                        input=token,
                        argument=argument,
                        docs=getdoc(FaultCode.MISSING_VALUE),
                    )

            try:
                argument.assign(value)
            except CoercionError as error:
                raise InvalidValueError(
                    "parse error for argument %r: %s" % (argument.name, error),
                    title="invalid value",
                    code=FaultCode.INVALID_VALUE,
                    hint="pass a %s value (run '%s --help' to see the defaults)" % (argument.kind.value, route),
                    chain=chain,
                    input=token,
                    value=value,
                    argument=argument,
                    docs=getdoc(FaultCode.INVALID_VALUE),
                ) from error

        if not self._help_requested:
            for argument in self._arguments:
                if argument.required and not argument.supplied:
                    raise RequiredArgumentError(
                        "required argument %r not specified" % argument.name,
                        title="required argument",
                        code=FaultCode.REQUIRED_ARGUMENT,
                        hint="add --%s <value> or run '%s --help' to see the expected usage" % (argument.name, route),
                        chain=chain,
                        argument=argument,
                        docs=getdoc(FaultCode.REQUIRED_ARGUMENT),
                    )

        self._parsed = True
        return chain

    # ── Lifecycle ───────────────────────────────────────────────────────────

    def reset(self):
        """
        Make this command (and every sub-command) ready for a fresh parse cycle.

        Behavior
        - positionals are cleared and parsed drops back to False.
        - every spec forgets it was supplied; optional specs get their default
          back, required specs keep the last parsed value.
        - sub-commands are reset recursively.

        Raises
        - ResetError: a default could not be parsed back (chained from the
          underlying CoercionError).
        """
        self._positionals.clear()
        self._parsed = False

        for argument in self._arguments:
            try:
                argument.reset()
            except CoercionError as error:
                route = " ".join(step.name for step in self.path)
                raise ResetError(
                    "unable to reset argument %r of command %r to its default" % (argument.name, route),
                    title="reset failure",
                    code=FaultCode.RESET_FAILURE,
                    hint="check the default value registered for %r" % argument.name,
                    command=self,
                    argument=argument,
                    docs=getdoc(FaultCode.RESET_FAILURE),
                ) from error

        for child in self._children.values():
            child.reset()

    # ── Rendering ───────────────────────────────────────────────────────────

    def help(self, console=Unset, /, *, colorful=False, fancy=False):
        """
        Render this command's help screen.

        Sections
        - usage line (route from the root, options, sub-command placeholder)
        - description
        - sub-commands (names, in registration order) when there are any
        - options: '-alias,  --name', then 'required argument' or
          'default value: <text>', then the help text (indented)

        Palette keys
        - usage-label, program-name, description-section, section-label,
          child-name, option-name, required, default-label, default-value,
          argument-help, panel-title

        Customization
        - Define a mapping named __styles__ in __main__ to override any palette entry.
        - When colorful is False, styling is suppressed entirely.
        """
        console = coalesce(console, Console())
        styles = defaultdict(str, {
            "usage-label": "bold #00E6FF",
            "program-name": "bold #FF4D94",
            "description-section": "italic #A3A3A3",
            "section-label": "bold #FFFFFF",
            "child-name": "bold #36C5F0",
            "option-name": "bold #22C55E",
            "required": "bold #EF4444",
            "default-label": "#737373",
            "default-value": "bold #FFD600",
            "argument-help": "#9CA3AF",
            "panel-title": "bold #FF4D94",
        } | getattr(__import__("__main__"), "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        indent = " " * 5
        renders = []

        route = " ".join(step.name for step in self.path)
        usage = Text.assemble(("usage", styler("usage-label")), ": ", (route, styler("program-name")), " [options]")
        if self._children:
            usage.append(" <sub-command>")
        usage.append(" [arguments...]")
        renders.append(usage)

        if self._description:
            renders.append(Text("\n") + Text(self._description, styler("description-section")))

        if self._children:
            children = Text("\n")
            children.append("sub-commands", styler("section-label")).append(":")
            for name in self._children:
                children.append("\n").append(indent).append(name, styler("child-name"))
            renders.append(children)

        options = Text("\n")
        options.append("options", styler("section-label")).append(":")
        for argument in self._arguments:
            names = Text("  ")
            if argument.alias is not None:
                names.append("-" + argument.alias, styler("option-name")).append(",  ")
            names.append("--" + argument.name, styler("option-name"))
            options.append("\n").append(names)

            if argument.required:
                options.append("\n").append(indent).append("required argument", styler("required"))
            else:
                options.append("\n").append(indent).append("default value: ", styler("default-label"))
                options.append(argument.default, styler("default-value"))

            if argument.help:
                options.append("\n").append(indent)
                options.append(argument.help.replace("\n", "\n" + indent), styler("argument-help"))
        renders.append(options)

        renderable = Group(*renders)
        if fancy:
            renderable = Panel(
                renderable,
                title=Text.assemble("[ ", f"{route} HELP".upper(), " ]", style=styler("panel-title")),
                title_align="left",
            )

        console.print(renderable)


__all__ = (
    "Command",
)

# the metaclass is an implementation detail of Command; keep it out of the module namespace.
del CommandType
