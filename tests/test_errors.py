"""Tests for finch.errors and the error-to-response translation."""

import logging

import pytest

from finch.data.errors import ConnectionError, QueryError
from finch.errors import (
    ConfigurationError,
    ContractBreachError,
    FinchError,
    HTTPError,
    NotFound,
    RegistrationError,
    RouteConflictError,
    ValidationError,
)
from finch.routing.route import RouteDefinition
from finch.schema import FieldViolation
from finch.server.errors import error_body, error_response

VIOLATION = FieldViolation("lastname", "required", "string", "missing")


class TestHierarchy:
    def test_composition_errors_are_configuration_errors(self) -> None:
        assert issubclass(RouteConflictError, ConfigurationError)
        assert issubclass(RegistrationError, ConfigurationError)
        assert issubclass(ConfigurationError, FinchError)

    def test_http_errors(self) -> None:
        assert NotFound().status == 404
        assert str(NotFound("gone")) == "404: gone"
        assert str(HTTPError(418)) == "418"
        assert ValidationError(part="query").status == 400
        assert ContractBreachError().status == 500

    def test_route_conflict_names_both_definitions(self) -> None:
        first = RouteDefinition("GET", "/hello/:name", lambda: None, group="greetings")
        second = RouteDefinition("GET", "/hello/:who", lambda: None)
        err = RouteConflictError(first, second)
        assert "GET /hello/:name (group 'greetings'" in str(err)
        assert "GET /hello/:who (app" in str(err)

    def test_validation_error_to_dict(self) -> None:
        err = ValidationError(part="query", violations=(VIOLATION,))
        assert err.to_dict() == {"part": "query", "violations": [VIOLATION.to_dict()]}


class TestErrorResponse:
    def test_error_body_shape(self) -> None:
        assert error_body(404, "nope") == {"status": 404, "error": "Not Found", "message": "nope"}
        assert error_body(599, "odd")["error"] == "Error"

    def test_validation_error_is_400_with_violations(self) -> None:
        err = ValidationError(part="query", violations=(VIOLATION,))
        resp = error_response(err, "GET", "/hello/Ada")
        assert resp.status == 400
        assert resp.data["error"] == "Bad Request"
        assert resp.data["part"] == "query"
        assert resp.data["violations"][0]["path"] == "lastname"
        assert "lastname is required" in resp.data["message"]

    def test_not_found(self) -> None:
        resp = error_response(NotFound("No route"), "GET", "/nope")
        assert resp.status == 404
        assert resp.data == {"status": 404, "error": "Not Found", "message": "No route"}

    def test_http_error_headers_forwarded(self) -> None:
        err = HTTPError(429, "slow down", headers=(("Retry-After", "5"),))
        resp = error_response(err, "GET", "/")
        assert resp.status == 429
        assert resp.headers == (("Retry-After", "5"),)

    def test_contract_breach_is_generic_500_and_logged(self, caplog) -> None:
        err = ContractBreachError(route="GET /", response_status=200, violations=(VIOLATION,))
        with caplog.at_level(logging.ERROR, logger="finch.server"):
            resp = error_response(err, "GET", "/")
        assert resp.status == 500
        assert "violations" not in resp.data
        assert "Contract breach" in caplog.text
        assert "lastname is required" in caplog.text

    def test_contract_breach_detail_in_debug(self) -> None:
        err = ContractBreachError(route="GET /", violations=(VIOLATION,))
        resp = error_response(err, "GET", "/", debug=True)
        assert resp.data["route"] == "GET /"
        assert resp.data["violations"][0]["kind"] == "required"

    def test_connection_error_is_503(self) -> None:
        resp = error_response(ConnectionError("refused"), "GET", "/books/")
        assert resp.status == 503
        assert resp.data["message"] == "Data store unavailable"

    def test_query_error_is_500_without_detail(self) -> None:
        resp = error_response(QueryError("no such table: books"), "GET", "/books/")
        assert resp.status == 500
        assert "books" not in resp.data["message"]

    def test_query_error_detail_in_debug(self) -> None:
        resp = error_response(QueryError("no such table: books"), "GET", "/books/", debug=True)
        assert "no such table" in resp.data["message"]

    @pytest.mark.parametrize("debug", [False, True])
    def test_unexpected_exception_is_500(self, debug: bool, caplog) -> None:
        with caplog.at_level(logging.ERROR, logger="finch.server"):
            resp = error_response(KeyError("title"), "POST", "/books/", debug=debug)
        assert resp.status == 500
        assert resp.data["error"] == "Internal Server Error"
        assert ("KeyError" in resp.data["message"]) is debug
        assert caplog.records
