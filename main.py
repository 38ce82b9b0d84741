from types import SimpleNamespace

from clasp import *

__prog__ = "clasp-demo"


class Repeat(Handler):
    def __init__(self, options):
        self.options = options

    def run(self, inputs, outputs):
        text = " ".join(self.command.positionals) or self.ask(inputs, outputs, "what should I repeat?")
        if text is Shell.CLOSED:
            return
        for _ in range(self.options.times):
            self.say(outputs, text.upper() if self.options.shout else text)

    @property
    def command(self):
        return self.options.command


def build():
    options = SimpleNamespace()
    repeat = Command("repeat", "Repeat the given words.\nAsks for them when none are given.")
    repeat.add_uint("times", "n", options, "times", 1, help="How many times to repeat.")
    repeat.add_bool("shout", "s", options, "shout", False, help="Repeat in upper case.")
    options.command = repeat
    return repeat, Repeat(options)


if __name__ == '__main__':
    shell = Shell("clasp demo shell, type 'help' to list commands.", ">", colorful=True)
    shell.add(*build())
    shell.loop()
