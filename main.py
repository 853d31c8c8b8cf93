from rich.pretty import pprint

from argweave import *

parser = Parser("My Parser")
parser.add_help("-h", "--help", descr="Print this help")
parser.add_string_argument("-i", "--input", descr="Input files").multi_value(1)
parser.add_flag("-s", "--flag1", descr="First flag").default(True)
parser.add_flag("-p", "--flag2", descr="Second flag")
parser.add_int_argument("--number", descr="A number")


if __name__ == '__main__':
    if parser.parse("app --help") and parser.help():
        print(parser.help_description())
    else:
        pprint(parser)
