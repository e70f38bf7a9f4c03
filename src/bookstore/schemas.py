"""Contracts for the bookstore routes."""

from finch.schema import SchemaContract, array, number, obj, string

_MESSAGE_BODY = obj({"message": string()}, required=["message"])

# Every greeting route answers {"message": "..."}
MESSAGE = SchemaContract(responses={200: _MESSAGE_BODY})

HELLO = SchemaContract.from_dict(
    {
        "querystring": {
            "properties": {"lastname": {"type": "string"}},
            "required": ["lastname"],
        },
        "params": {
            "properties": {"name": {"type": "string"}},
            "required": ["name"],
        },
        "response": {
            200: {
                "properties": {"message": {"type": "string"}},
                "required": ["message"],
            },
        },
    }
)

BOOK = obj({"title": string(), "author": string()}, required=["title", "author"])

BOOKS = SchemaContract(responses={200: obj({"books": array()}, required=["books"])})

BOOK_POST = SchemaContract(
    body=obj({"book": BOOK}, required=["book"]),
    responses={200: obj({"status": number()}, required=["status"])},
)
