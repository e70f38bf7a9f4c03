"""Greetings routes, mounted under ``/greetings``."""

from finch.routing import RouteGroup

from bookstore.schemas import MESSAGE

greetings = RouteGroup("greetings")


@greetings.route("/work", contract=MESSAGE)
def work():
    return {"message": "Hello World from greetings controller!"}


@greetings.route("/hello/:name", contract=MESSAGE)
def hello(name: str):
    return {"message": f"Hello {name} from greetings controller!"}
