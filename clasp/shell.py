"""
Clasp interactive shell: a read-eval-print host for Command trees.

What this module provides
- Shell: reads lines, tokenizes them, routes the first token to a registered
  top-level Command, parses the rest, renders help or runs the command's handler,
  and resets the command for the next cycle.
- Handler: base class for command handlers. A handler runs on its own thread and
  talks to the shell through two queues:
  • inputs: lines the shell forwards after a GET_USER_INPUT request,
  • outputs: Response objects for the shell to act on.
  Returning from run() closes the conversation.
- Response / ResponseType: the messages a handler can send.

Built-in commands
- quit: end the current session.
- help: list every registered command with its description.

Faults raised while tokenizing, routing or parsing are printed (never raised) so
the session keeps going; a handler that raises is reported as a delegated error.

Example
    from clasp import Command, Handler, Shell

    class Greet(Handler):
        def run(self, inputs, outputs):
            name = self.ask(inputs, outputs, "who are you?")
            self.say(outputs, f"hello, {name}!")

    shell = Shell("welcome!", ">")
    shell.add(Command("greet", "Say hello."), Greet())
    shell.loop()
"""
import collections
import queue
import sys
import threading
from enum import IntEnum

from rich.console import Console

from .commands import Command
from .faults import *
from .tokenizer import tokenize
from .utils import *


class ResponseType(IntEnum):
    """
    what a handler asks the shell to do.
    """
    END_SESSION = 0
    PRINT_MESSAGE = 1
    GET_USER_INPUT = 2


Response = collections.namedtuple("Response", ("type", "message"), defaults=("",))


class Handler:
    """
    Base class for shell command handlers.

    Subclasses implement run(inputs, outputs). The bound Command has already been
    parsed when run() is called, so its bindings hold this cycle's values.
    Plain callables with the same signature are accepted by Shell.add as well.
    When a handler ends the session the command is not reset, so bindings keep
    this cycle's values for a handler thread that is still running.
    """

    def run(self, inputs, outputs):
        raise NotImplementedError(f"{type(self).__name__}.run() is not implemented")

    @staticmethod
    def say(outputs, message, /):
        """
        ask the shell to print a message.
        """
        outputs.put(Response(ResponseType.PRINT_MESSAGE, message))

    @staticmethod
    def ask(inputs, outputs, message, /):
        """
        ask the shell to print a message and wait for the user's answer.

        returns Shell.CLOSED when the input stream ended instead.
        """
        outputs.put(Response(ResponseType.GET_USER_INPUT, message))
        return inputs.get()

    @staticmethod
    def end(outputs, /):
        """
        ask the shell to end the session.
        """
        outputs.put(Response(ResponseType.END_SESSION))


class _QuitHandler(Handler):
    def run(self, inputs, outputs):
        self.end(outputs)


class _HelpHandler(Handler):
    def __init__(self, shell):
        self._shell = shell

    def run(self, inputs, outputs):
        lines = ["List of available commands:", ""]
        for name, command in self._shell.commands.items():
            lines.append(name + " -- " + command.description.replace("\n", "\n    "))
        self.say(outputs, "\n".join(lines))


class Shell:
    """
    Interactive host for top-level Commands.

    Parameters
    - banner: str
      Printed once when loop() starts.
    - prompt: str
      Printed (followed by a blank) before every line is read.
    - stdin: file-like
      Source of lines (anything with readline()); sys.stdin by default.
    - console: rich.console.Console
      Destination of every message, help screen and fault; stdout by default.
    - colorful, fancy: bool
      Rendering flags for faults and help screens.

    Cycle (see step)
    - tokenize → route → parse → help or handler → reset.
    """

    CLOSED = object()
    """
    End-of-channel marker: put on the outputs queue when a handler is done, and
    on the inputs queue when the user's input stream ended.
    """

    def __init__(self, banner, prompt, *, stdin=Unset, console=Unset, colorful=False, fancy=False):
        if not isinstance(banner, str):
            raise TypeError("shell 'banner' must be a string")
        if not isinstance(prompt, str):
            raise TypeError("shell 'prompt' must be a string")

        self._banner = banner
        self._prompt = prompt
        self._stdin = coalesce(stdin, sys.stdin)
        self._console = coalesce(console, Console())
        self._colorful = bool(colorful)
        self._fancy = bool(fancy)
        self._commands = {}
        self._handlers = {}

        self.add(Command("quit", "End current session."), _QuitHandler())
        self.add(Command("help", "Show help message."), _HelpHandler(self))

    @property
    def commands(self):
        """
        registered top-level commands by name, in registration order.
        """
        return dict(self._commands)

    @property
    def console(self):
        return self._console

    def add(self, command, handler, /):
        """
        Register a top-level command together with the handler that runs it.

        Raises
        - TypeError: command is not a Command, or handler has no run() and is not callable.
        - ValueError: command is a sub-command of another command.
        - DuplicateCommandError: a command with the same name is registered.
        """
        if not isinstance(command, Command):
            raise TypeError("shell command must be a command")
        if command.parent is not None:
            raise ValueError(f"shell command {command.name!r} is a sub-command of {command.parent.name!r}")

        if callable(getattr(handler, "run", None)):
            handler = handler.run
        elif not callable(handler):
            raise TypeError("shell handler must be callable or provide a run() method")

        if command.name in self._commands:
            raise DuplicateCommandError(
                "command with name %r already registered with the shell" % command.name,
                title="duplicate command",
                code=FaultCode.DUPLICATE_COMMAND,
                hint="rename one of the %r commands" % command.name,
                command=command,
                input=command.name,
                docs=getdoc(FaultCode.DUPLICATE_COMMAND),
            )

        self._commands[command.name] = command
        self._handlers[command.name] = handler
        return command

    # ── I/O ─────────────────────────────────────────────────────────────────

    def _print(self, message, /, **options):
        self._console.print(message, markup=False, highlight=False, **options)

    def _readline(self):
        """
        read one line without its line terminator; None at end of input.
        """
        if not (line := self._stdin.readline()):
            return None
        return line.rstrip("\r\n")

    def _report(self, fault, /):
        trigger(fault, shell=True, console=self._console, colorful=self._colorful, fancy=self._fancy)

    # ── Cycle ───────────────────────────────────────────────────────────────

    def loop(self):
        """
        Run the session until 'quit', an END_SESSION response or end of input.
        """
        self._print(self._banner)
        while True:
            self._print(self._prompt, end=" ")
            if (line := self._readline()) is None:
                self._print("")
                break
            if not self.step(line):
                break

    def step(self, line, /):
        """
        Run one cycle for a line; return False when the session must end.
        """
        try:
            tokens = tokenize(line)
        except UnterminatedQuoteError as fault:
            self._report(fault)
            return True

        if not tokens:
            return True

        name, *arguments = tokens
        try:
            command = self._commands[name]
        except KeyError:
            self._report(UnknownCommandError(
                "unknown command %r" % name,
                title="unknown command",
                code=FaultCode.UNKNOWN_COMMAND,
                hint="run 'help' to see all available commands",
                input=name,
                prog=name,
                docs=getdoc(FaultCode.UNKNOWN_COMMAND),
            ))
            return True

        alive = True
        try:
            try:
                chain = command.parse(arguments)
            except CommandException as fault:
                self._report(fault)
                return alive

            # -h/--help is bound to the innermost command the line routed into
            innermost = command
            for child in chain[1:]:
                innermost = innermost.children[child]

            if innermost.help_requested:
                innermost.help(self._console, colorful=self._colorful, fancy=self._fancy)
                return alive

            alive = self._dispatch(command)
            return alive
        finally:
            # a handler that ended the session may still be running; leave its bindings alone
            if alive:
                try:
                    command.reset()
                except ResetError as fault:
                    self._report(fault)

    def _dispatch(self, command):
        """
        run the command's handler on a thread and serve its responses.
        """
        handler = self._handlers[command.name]
        inputs, outputs = queue.Queue(), queue.Queue()
        failures = []

        def runner():
            try:
                handler(inputs, outputs)
            except Exception as error:
                failures.append(error)
            finally:
                outputs.put(Shell.CLOSED)

        thread = threading.Thread(target=runner, name=f"clasp-{command.name}", daemon=True)
        thread.start()

        alive = True
        while (response := outputs.get()) is not Shell.CLOSED:
            if not isinstance(response, Response):
                self._print("unexpected response from command handler")
                continue

            match response.type:
                case ResponseType.GET_USER_INPUT:
                    self._print(response.message)
                    if (answer := self._readline()) is None:
                        alive = False
                        inputs.put(Shell.CLOSED)
                    else:
                        inputs.put(answer)
                case ResponseType.PRINT_MESSAGE:
                    self._print(response.message)
                case ResponseType.END_SESSION:
                    alive = False
                    break
                case _:
                    self._print("unexpected response from command handler")

        if alive:
            # the handler is done; its failure (if any) was recorded before CLOSED
            thread.join()
            for error in failures:
                fault = DelegatedCommandError(
                    "command %r failed: %s" % (command.name, error),
                    title="delegated error",
                    code=FaultCode.DELEGATED_ERROR,
                    hint="check the handler of %r" % command.name,
                    chain=(command.name,),
                    command=command,
                    docs=getdoc(FaultCode.DELEGATED_ERROR),
                )
                fault.__cause__ = error
                self._report(fault)

        return alive


__all__ = (
    "Shell",
    "Handler",
    "Response",
    "ResponseType",
)
