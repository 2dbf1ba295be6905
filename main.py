from rich.pretty import pprint

from helmsman import *

__prog__ = "helmsman-demo"

engine = console(fancy=True)


@engine.command(name="test")
def test(text=Argument(type=str), /):
    print(text)


@test.command(name="echo-optional")
def echo(
        text=Argument(type=str),
        number=Argument(type=int | None, mandatory=False),
        decimal=Argument(type=float | None, mandatory=False),
        /,
):
    print(text, number, decimal)


@test.command(name="throw-exception")
def throw():
    raise RuntimeError("thrown on purpose")


@test.command(name="named", named=True)
def named(
        text=Argument("t", "text", type=str),
        number=Argument("n", "number", type=int | None, mandatory=False),
        /,
):
    print(text, number)


@test.before
def before(context):
    print("before", repr(context.unparsed))


@test.fallback
def fallback(context, exception):
    print("fallback", type(exception).__name__)


if __name__ == '__main__':
    engine.register(test)
    pprint(test)
    engine.start()
    engine.join()
    engine.stop()
