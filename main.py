from rich.pretty import pprint

from tokopt import *

parser = Parser(descr="This tool is used to...(whatever)....", version="1.0.33", colorful=True)


@parser.option("hello_few_times,hello", 'prints "hello" few times')
def hello_few_times(times: UInt = 1):
    print(" ".join(["hello"] * times))


@parser.option("-d_sth", "does something (...)")
def do_something(letter: Char, ratio: Double, count: ULong):
    print("do_something:", letter, ratio, count)


@parser.option("only", "runs on its own")
def only():
    print("only")


parser.setup_required_options("-d_sth", "hello_few_times")
parser.setup_option_as_standalone("only")


if __name__ == '__main__':
    if not parser.run():
        pprint(parser)
