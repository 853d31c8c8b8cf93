"""
Argweave parser: registration, token resolution and typed queries.

What this module provides
- Parser: owns an ordered set of arguments (long name → Flag/String/Int), a
  short-name table and the transient positional buffer, and implements
  • registration (add_flag, add_string_argument, add_int_argument, add_help),
  • the tokenizer/resolver (parse),
  • positional reconciliation and post-parse validation,
  • typed queries (get_string_value, get_int_value, get_flag),
  • help rendering (help_description for plain text, print_help through rich).

Token grammar
    --name                 long option (flag, or greedy values follow)
    --name value [...]     long option with greedily consumed values
    --name=value           long option with exactly one inline value
    -c / -cde              short option(s); each one consumes values in turn
    -cde=value             short options sharing one inline value
    bare                   positional candidate, grouped into runs

Quick start
    from argweave import Parser

    parser = Parser("tool")
    parser.add_help("-h", "--help", descr="show this help")
    parser.add_string_argument("-i", "--input", descr="input files").multi_value(1)
    parser.add_flag("-s", "--strict").default(True)
    parser.add_int_argument("--number")

    if parser.parse(["tool", "--input", "a.txt", "-s", "--number", "42"]):
        parser.get_string_value("input")  # "a.txt"
        parser.get_flag("strict")         # False (toggled from True)
        parser.get_int_value("number")    # 42

Failure model
- The first failure aborts the parse. In shell mode (default) the fault is
  printed to stderr and parse() returns False; otherwise it is raised.
- The last fault stays available on Parser.fault.
"""
import shlex
import sys
from collections import deque
from collections.abc import Iterable
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .arguments import Argument, Flag, String, Int
from .faults import *
from .utils import *


class Parser:
    """
    Declarative command-line parser.

    Lifecycle
    - Construct with a display name, register arguments (each add_* call
      returns the new argument so modifiers chain), call parse() with the
      token sequence, then query typed values by long name.
    - Modifiers are rejected once the first parse started.

    Runtime options
    - shell: print faults and return False (True) or raise them (False).
    - fancy: render faults and help inside a rich Panel.
    - colorful: apply the rich palette (overridable through __styles__ in __main__).
    """

    def __init__(self, name, /, descr=Unset, *, shell=True, fancy=False, colorful=False):
        if not isinstance(name, str):
            raise TypeError("parser 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError("parser 'name' cannot be empty")
        if not isinstance(descr, str | Text | Unset):
            raise TypeError("parser 'descr' must be a string")

        self._name = name
        self._descr = coalesce(descr.strip() or Unset if isinstance(descr, str) else descr)
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)

        self._arguments = {}
        self._shorts = {}
        self._positionals = []
        self._helper = None
        self._fault = None

        self._tokens = deque()
        self._index = 0

    @property
    def name(self):
        return self._name

    @property
    def descr(self):
        return self._descr

    @property
    def shell(self):
        return self._shell

    @property
    def fancy(self):
        return self._fancy

    @property
    def colorful(self):
        return self._colorful

    @property
    def arguments(self):
        """Read-only view of the registered arguments, in registration order."""
        return MappingProxyType(self._arguments)

    @property
    def shorts(self):
        """Read-only view of the short-name → long-name table."""
        return MappingProxyType(self._shorts)

    @property
    def fault(self):
        """The fault that aborted the last parse, or None."""
        return self._fault

    def __repr__(self):
        return "parser(name=%r, arguments=%r)" % (self._name, list(self._arguments))

    def __rich_repr__(self):
        yield "name", self._name
        yield "descr", self._descr
        yield "arguments", list(self._arguments.values())
        yield "shell", self._shell
        yield "fancy", self._fancy
        yield "colorful", self._colorful

    # ── Registration ───────────────────────────────────────────────────────

    def _register(self, argument):
        """
        Record an argument under its long name (and short name, if any).

        Raises
        - ConfigurationError on a duplicated long or short name, or when
          parsing already started.
        """
        if not isinstance(argument, Argument):
            raise TypeError("parser can only register flag, string or int arguments")
        if any(known._frozen for known in self._arguments.values()):  # NOQA: Internal flag
            raise ConfigurationError(f"cannot register {argument.name!r} once parsing has started")
        if argument.name in self._arguments:
            raise ConfigurationError(f"argument name '--{argument.name}' is already in use")
        if argument.short is not None and argument.short in self._shorts:
            raise ConfigurationError(
                f"short name '-{argument.short}' is already used by '--{self._shorts[argument.short]}'"
            )

        self._arguments[argument.name] = argument
        if argument.short is not None:
            self._shorts[argument.short] = argument.name
        return argument

    def add_flag(self, *names, descr=Unset):
        return self._register(Flag(*names, descr=descr))

    def add_string_argument(self, *names, descr=Unset):
        return self._register(String(*names, descr=descr))

    def add_int_argument(self, *names, descr=Unset):
        return self._register(Int(*names, descr=descr))

    def add_help(self, *names, descr=Unset):
        """
        Register the help flag.

        When it is set during a parse, the parse succeeds without reconciling
        positionals or validating the other arguments.
        """
        if self._helper is not None:
            raise ConfigurationError("help flag is already registered as '--%s'" % self._helper.name)
        self._helper = self._register(Flag(*names, descr=descr))
        return self._helper

    # ── Queries ────────────────────────────────────────────────────────────

    def get_argument(self, name, /):
        return self._arguments.get(name)

    def get_string_value(self, name, /, index=0):
        match self._arguments.get(name):
            case String() as argument:
                return argument.get_value(index)
            case _:
                return ""

    def get_int_value(self, name, /, index=0):
        match self._arguments.get(name):
            case Int() as argument:
                return argument.get_value(index)
            case _:
                return 0

    def get_flag(self, name, /, index=0):
        match self._arguments.get(name):
            case Flag() as argument:
                return argument.get_value(index)
            case _:
                return False

    def help(self):
        """True when the registered help flag was set by the last parse."""
        return self._helper is not None and self._helper.get_value()

    # ── Faults ─────────────────────────────────────────────────────────────

    def trigger(self, fault, /, **options):
        """
        Surface a fault with this parser's runtime options merged in.

        Exceptions are remembered on Parser.fault before being surfaced; the
        remembered fault is the one that gets printed or raised.
        """
        options |= dict(parser=self, shell=self._shell, fancy=self._fancy, colorful=self._colorful)
        if isinstance(fault, ParserException):
            self._fault = fault = fault.__replace__(**options)
            options = {}
        trigger(fault, **options)

    # ── Resolver ───────────────────────────────────────────────────────────

    def _next(self):
        """Pop the next token; returns (position, token)."""
        position = self._index
        self._index += 1
        return position, self._tokens.popleft()

    def _apply(self, argument, value, position, /):
        """
        Write one raw value into an argument, rewording conversion faults
        with the token position.
        """
        try:
            argument.set_value(value)
        except ValueParseError as fault:
            raise ValueParseError(
                "malformed integer %r for argument %r at %s position" % (value, argument.name, ordinal(position)),
                **{**fault.options, "index": position}
            ) from None

    def _consume(self, argument, position, /):
        """
        Feed an option its values from the token stream.

        Flags are set without a value. Value-bearing arguments greedily take
        up to values_count() following tokens that do not start with '-'.
        """
        count = argument.values_count()
        if not count:
            self._apply(argument, "", position)
            return

        while self._tokens and not self._tokens[0].startswith("-") and count > 0:
            self._apply(argument, *reversed(self._next()))
            count -= 1

    def _inline(self, argument, input, value, position, /):
        if not value and not isinstance(argument, Flag):
            self.trigger(EmptyInlineValueWarning(
                "empty inline value for argument %r at %s position" % (input, ordinal(position)),
                title="empty inline value",
                code=FaultCode.EMPTY_INLINE_VALUE,
                input=input,
                index=position,
                argument=argument,
                hint="add a value after '=' or pass it after a space (for example: %s <value>)" % input,
                docs=getdoc(FaultCode.EMPTY_INLINE_VALUE),
            ))
        self._apply(argument, value, position)

    def _parse_long(self, token, position, /):
        """
        Resolve '--name', '--name value...' or '--name=value'.
        """
        name, assigned, value = token[2:].partition("=")

        try:
            argument = self._arguments[name]
        except KeyError:
            raise UnknownArgumentError(
                "unknown argument '--%s' at %s position" % (name, ordinal(position)),
                title="unknown argument",
                code=FaultCode.UNKNOWN_ARGUMENT,
                input=token,
                index=position,
                hint="run '%s --help' to see all available arguments" % self._name,
                docs=getdoc(FaultCode.UNKNOWN_ARGUMENT),
            ) from None

        if assigned:
            self._inline(argument, "--" + name, value, position)
        else:
            self._consume(argument, position)

    def _parse_short(self, token, position, /):
        """
        Resolve a short cluster '-abc' or '-abc=value'.

        Every character must be a registered short name. With '=value' the
        same value goes once to each argument; otherwise each argument
        consumes from the shared token stream in turn.
        """
        names, assigned, value = token[1:].partition("=")

        for short in names:
            try:
                argument = self._arguments[self._shorts[short]]
            except KeyError:
                raise UnknownArgumentError(
                    "unknown short argument '-%s' in %r at %s position" % (short, token, ordinal(position)),
                    title="unknown argument",
                    code=FaultCode.UNKNOWN_SHORT_ARGUMENT,
                    input=token,
                    index=position,
                    hint="run '%s --help' to see all available arguments" % self._name,
                    docs=getdoc(FaultCode.UNKNOWN_SHORT_ARGUMENT),
                ) from None

            if assigned:
                self._inline(argument, "-" + short, value, position)
            else:
                self._consume(argument, position)

    def _parse_run(self, token, position, /):
        """
        Buffer a maximal run of bare tokens as (run start, position, token).
        """
        self._positionals.append((position, position, token))
        while self._tokens and not self._tokens[0].startswith("-"):
            self._positionals.append((position, *self._next()))

    def _reconcile(self):
        """
        Distribute buffered positional tokens to positional arguments.

        Positional arguments are visited in registration order. Each one takes
        every buffered token of the run found at the current cursor, so
        successive runs go to successive positional arguments.

        Returns
        - the index of the first token that no argument took (len(buffer)
          when everything was assigned).
        """
        cursor = 0
        for argument in self._arguments.values():
            if not argument.is_positional() or cursor >= len(self._positionals):
                continue
            run = self._positionals[cursor][0]
            while cursor < len(self._positionals) and self._positionals[cursor][0] == run:
                _, position, token = self._positionals[cursor]
                self._apply(argument, token, position)
                cursor += 1
        return cursor

    def _validate(self):
        """
        Run reconciliation, then each argument's correctness check.
        """
        cursor = self._reconcile()
        if cursor < len(self._positionals):
            run, _, token = self._positionals[cursor]
            raise PositionalMismatchError(
                "unexpected positional argument %r in run from %s position" % (token, ordinal(run)),
                title="unexpected positional",
                code=FaultCode.POSITIONAL_MISMATCH,
                input=token,
                index=run,
                leftover=[token for _, _, token in self._positionals[cursor:]],
                hint="remove the extra values or run '%s --help' to see the positional arguments" % self._name,
                docs=getdoc(FaultCode.POSITIONAL_MISMATCH),
            )

        for name, argument in self._arguments.items():
            if argument.is_correct():
                continue
            if argument.is_multi_value():
                raise ArgumentInvalidError(
                    "argument %r expects at least %d values" % (name, argument.minimum),
                    title="not enough values",
                    code=FaultCode.NOT_ENOUGH_VALUES,
                    input=name,
                    argument=argument,
                    hint="pass more values (for example: --%s <value> ...)" % name,
                    docs=getdoc(FaultCode.NOT_ENOUGH_VALUES),
                )
            raise ArgumentInvalidError(
                "argument %r is required but was not provided" % name,
                title="missing argument",
                code=FaultCode.INVALID_ARGUMENT,
                input=name,
                argument=argument,
                hint="pass a value (for example: --%s=<value>)" % name,
                docs=getdoc(FaultCode.INVALID_ARGUMENT),
            )

    def _parseargs(self, tokens, *, index=1):
        """
        Resolve tokens[index:] into the registered arguments.

        phases
        - loop: classify each token as long option, short cluster or bare run
          and dispatch it; the first failure raises.
        - help short-circuit: a set help flag ends the parse successfully.
        - post-parse: reconcile positional runs, then validate every argument.
        """
        for argument in self._arguments.values():
            argument._freeze()  # NOQA: Internal flag

        self._tokens = deque(tokens[index:])
        self._index = index
        self._positionals.clear()

        try:
            while self._tokens:
                position, token = self._next()
                if token.startswith("--"):
                    self._parse_long(token, position)
                elif token.startswith("-"):
                    self._parse_short(token, position)
                else:
                    self._parse_run(token, position)

            if self._helper is not None and self._helper.is_set:
                return

            self._validate()
        finally:
            self._positionals.clear()
            self._tokens.clear()

    def parse(self, prompt=Unset, /, index=1):
        """
        Parse a command invocation.

        Parameters
        - prompt:
          • Unset: read sys.argv.
          • str: shell-like string, split with shlex.split.
          • Iterable[str]: pre-tokenized sequence.
        - index: first token to resolve; the default skips the program name.

        Returns
        - True on success. On failure, False in shell mode (the fault is
          printed); outside shell mode the fault is raised instead.
        """
        if prompt is Unset:
            tokens = list(sys.argv)
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            tokens = list(prompt)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("parse() argument must be a string or an iterable of strings")
        else:
            raise TypeError("parse() argument must be a string or an iterable of strings")

        if not isinstance(index, int) or isinstance(index, bool) or index < 0:
            raise TypeError("parse() 'index' must be a non-negative integer")

        self._fault = None
        try:
            self._parseargs(tokens, index=index)
        except ParserException as fault:
            self.trigger(fault)
            return False
        return True

    # ── Help ───────────────────────────────────────────────────────────────

    def _tags(self, argument):
        """Help annotations for one argument, in display order."""
        tags = []
        if argument.is_positional():
            tags.append("(positional)")
        if argument.is_multi_value():
            tags.append("(minimum %d args)" % argument.minimum)
        if default := argument.default_value():
            tags.append("(default %s)" % default)
        return tags

    def help_description(self):
        """
        Return the plain-text help listing.

        Layout
            <name>
            <help description>        (only when a help flag is registered)
            Options:
            -s, --name, descr, (positional), (minimum N args), (default X)
        """
        lines = [self._name]
        if self._helper is not None:
            lines.append(str(self._helper.descr or ""))
        lines.append("Options:")

        for argument in self._arguments.values():
            if argument is self._helper:
                continue
            parts = ["--" + argument.name]
            if argument.short is not None:
                parts.insert(0, "-" + argument.short)
            if argument.descr:
                parts.append(str(argument.descr))
            parts.extend(self._tags(argument))
            lines.append(", ".join(parts))

        return "\n".join(lines) + "\n"

    def _helper_renderable(self):
        """
        Build the rich help renderable.

        Palette keys
        - usage-label, program-name, description-section
        - group-label, flag-name, argument-name, argument-description, tag
        - panel-title

        Customization
        - Define a mapping named __styles__ in __main__ to override any entry.
        - When colorful is False, styling is suppressed.
        """
        styles = {
            "usage-label": "bold #00E6FF",  # cyan
            "program-name": "bold #FF4D94",  # magenta-pink
            "description-section": "italic #A3A3A3",  # neutral gray
            "group-label": "bold #FFFFFF",  # white headers
            "flag-name": "bold #22C55E",  # green for flags
            "argument-name": "bold #00E6FF",  # cyan for value-bearing arguments
            "argument-description": "#9CA3AF",  # muted gray
            "tag": "#FFD600",  # amber annotations
            "panel-title": "bold #FF4D94",
        } | getattr(__import__("__main__"), "__styles__", {})

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), styles.get(style, "") if self._colorful else "")

        usage = [text(self._name, "program-name")]
        for argument in self._arguments.values():
            if argument.is_positional():
                label = "<%s>" % argument.name
                usage.append(text(label + " ..." if argument.is_multi_value() else label, "argument-name"))
        if any(not argument.is_positional() for argument in self._arguments.values()):
            usage.append(text("[options]", "argument-name"))

        renders = [Text.assemble(text("usage: ", "usage-label"), Text(" ").join(usage))]
        if self._descr:
            renders.append(text(self._descr, "description-section"))
        if self._helper is not None and self._helper.descr:
            renders.append(text(self._helper.descr, "description-section"))

        table = Table.grid(padding=(0, 2))
        table.add_column(no_wrap=True)
        table.add_column()
        for argument in self._arguments.values():
            style = "flag-name" if isinstance(argument, Flag) else "argument-name"
            names = Text(", ").join(
                text(name, style) for name in (
                    "-" + argument.short if argument.short is not None else "",
                    "--" + argument.name,
                ) if name
            )
            details = Text(" ").join(
                [text(argument.descr, "argument-description")] * bool(argument.descr) +
                [text(tag, "tag") for tag in self._tags(argument) if argument is not self._helper]
            )
            table.add_row(names, details)

        renders.append(text("options:", "group-label"))
        renders.append(table)

        if self._fancy:
            return Panel(Group(*renders), title=text(self._name, "panel-title"), title_align="left")
        return Group(*renders)

    def print_help(self, file=Unset):
        """
        Render the help through rich; stderr after a failed parse, else stdout.
        """
        if file is Unset:
            console = Console(stderr=self._fault is not None)
        else:
            console = Console(file=file)
        console.print(self._helper_renderable())


__all__ = (
    "Parser",
)
