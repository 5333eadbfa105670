from __future__ import annotations

import pytest


def test_unexpected_request_fails_test_at_teardown(pytester: pytest.Pytester) -> None:
    pytester.makepyfile(
        """
        def test_unexpected(httpmock_server):
            response = httpmock_server.client().get("/nope")
            assert response.status == 404
            httpmock_server.finish()
        """
    )

    result = pytester.runpytest("-p", "no:cacheprovider")

    result.assert_outcomes(passed=1, errors=1)
    result.stdout.fnmatch_lines(["*Unexpected request for '/nope'*"])


def test_missing_call_fails_only_when_finish_is_called(pytester: pytest.Pytester) -> None:
    pytester.makepyfile(
        """
        from httpmock import resp_json


        def test_verified(httpmock_server):
            httpmock_server.expect("/never", resp_json({"id": 1}))
            httpmock_server.finish()


        def test_not_verified(httpmock_server):
            httpmock_server.expect("/never", resp_json({"id": 1}))
        """
    )

    result = pytester.runpytest("-p", "no:cacheprovider")

    result.assert_outcomes(passed=2, errors=1)
    result.stdout.fnmatch_lines(["*No request for '/never'*"])


def test_clean_run_passes(pytester: pytest.Pytester) -> None:
    pytester.makepyfile(
        """
        from httpmock import method, optional, req_json, resp_json, status


        def test_clean(httpmock_server):
            httpmock_server.expect("/orders", method("post"), req_json({"sku": "a1"}), status(201), resp_json({"id": 7}))
            httpmock_server.expect("/health", optional())

            response = httpmock_server.client().post_json("/orders", {"sku": "a1"})

            assert response.status == 201
            assert response.json() == {"id": 7}
            httpmock_server.finish()
        """
    )

    result = pytester.runpytest("-p", "no:cacheprovider")

    result.assert_outcomes(passed=1)


def test_invalid_url_fails_test_immediately(pytester: pytest.Pytester) -> None:
    pytester.makepyfile(
        """
        def test_bad_url(httpmock_server):
            httpmock_server.expect("/bad%zz")
            httpmock_server.finish()
        """
    )

    result = pytester.runpytest("-p", "no:cacheprovider")

    result.assert_outcomes(failed=1, errors=1)
    result.stdout.fnmatch_lines(["*FATAL: parse*"])
    assert "FatalFailure" in result.stdout.str()


def test_fixtures_leave_global_logging_alone(pytester: pytest.Pytester, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("HTTPMOCK_CONFIGURE_LOGGING", raising=False)
    pytester.makepyfile(
        """
        import logging

        APP_HANDLER = logging.NullHandler()
        logging.getLogger().addHandler(APP_HANDLER)


        def test_handlers_survive(httpmock_server):
            assert APP_HANDLER in logging.getLogger().handlers
            httpmock_server.finish()


        def teardown_module():
            logging.getLogger().removeHandler(APP_HANDLER)
        """
    )

    result = pytester.runpytest("-p", "no:cacheprovider")

    result.assert_outcomes(passed=1)
