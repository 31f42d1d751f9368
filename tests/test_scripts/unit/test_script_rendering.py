"""Bruno test script synthesis and rendering tests."""

from __future__ import annotations

from bruno_collection_generator.configuration import (
    AssertionSpec,
    CsvScenario,
    QuerySpec,
    ResponseContract,
)
from bruno_collection_generator.test_scripts import (
    CaptureToEnv,
    Comment,
    Ref,
    StoreFieldToEnv,
    custom_assertion_statements,
    csv_scenario_statements,
    data_preparation_statements,
    failure_lookup_statements,
    generator_probe_statements,
    js_ref,
    negative_statements,
    positive_statements,
    render_script,
)


def test_js_ref_uses_bracket_access_for_non_identifiers() -> None:
    ref = Ref("response").child("TXLife", "TransResult", "ResultCode", "@tc")

    assert js_ref(ref) == 'response.TXLife.TransResult.ResultCode["@tc"]'


def test_capture_guards_every_hop() -> None:
    script = render_script(
        [CaptureToEnv(Ref("response").child("A", "B"), "TransRefGUID", "TransRefGUID")]
    )

    assert script.splitlines()[0] == "if (response && response.A && response.A.B) {"
    assert 'bru.setEnvVar("TransRefGUID", captured);' in script


def test_comment_attaches_to_following_statement() -> None:
    script = render_script(
        [Comment("Store value"), StoreFieldToEnv("jsonData", "VALUE", "ClientId")]
    )

    assert script.startswith("// Store value\nlet record = Array.isArray(jsonData)")
    assert "\n\n" not in script


def test_data_preparation_script_stores_value_column() -> None:
    query = QuerySpec(name="Client", endpoint="/client", query="SELECT 1", variable_name="Cid")

    script = render_script(data_preparation_statements(query))

    assert script.startswith("let jsonData = res.getBody();")
    assert 'test("Status code is 200", function () {' in script
    assert "expect(res.getStatus()).to.equal(200);" in script
    assert 'test("Response contains data", function () {' in script
    assert 'bru.setEnvVar("Cid", record.VALUE);' in script


def test_data_preparation_script_without_variable_skips_store() -> None:
    query = QuerySpec(name="Client", endpoint="/client", query="SELECT 1")

    script = render_script(data_preparation_statements(query))

    assert "bru.setEnvVar" not in script


def test_positive_script_checks_envelope_and_success_code() -> None:
    script = render_script(positive_statements(ResponseContract()))

    assert "bru.setEnvVar(\"TransRefGUID\", captured);" in script
    assert "expect(response.TXLife.TXLifeResponse).to.exist;" in script
    assert 'expect(response.TXLife.TXLifeResponse.TransResult.ResultCode["@tc"]).to.eql("1");' in (
        script
    )
    assert script.count("test(") == 3


def test_negative_script_accepts_failure_statuses() -> None:
    script = render_script(negative_statements(ResponseContract()))

    assert "// Extract transaction reference even from error response" in script
    assert "expect(res.getStatus()).to.be.oneOf([400, 422, 500]);" in script
    assert 'test("Error result exists", function () {' in script


def test_failure_lookup_script_expects_non_empty_array() -> None:
    script = render_script(failure_lookup_statements())

    assert "expect(responseData).to.be.an('array').that.is.not.empty;" in script


def test_generator_probe_checks_environment_variable() -> None:
    script = render_script(generator_probe_statements("TransExeDate"))

    assert script.startswith("// Variable TransExeDate generated in pre-request script")
    assert 'expect(bru.getEnvVar("TransExeDate")).to.exist;' in script
    assert 'console.log("TransExeDate value:", bru.getEnvVar("TransExeDate"));' in script


def test_custom_assertions_render_one_block_each(caplog) -> None:
    statements = custom_assertion_statements(
        (
            AssertionSpec(type="status", expected="201", description="Created"),
            AssertionSpec(type="responseTime", expected="1500"),
            AssertionSpec(type="jsonPath", expected="$.TXLife"),
            AssertionSpec(type="body", expected="Success"),
            AssertionSpec(type="header", expected="Content-Type"),
        )
    )

    script = render_script(statements)

    assert 'test("Created", function () {' in script
    assert "expect(res.getStatus()).to.equal(201);" in script
    assert "expect(res.getResponseTime()).to.be.below(1500);" in script
    assert "// JSON path $.TXLife is not evaluated; only the body is checked" in script
    assert '.to.include("Success");' in script
    assert "// Unsupported assertion type 'header' was skipped" in script
    assert script.count("test(") == 4
    assert "header" in caplog.text


def test_csv_scenario_script_reports_scenario_type() -> None:
    statements = csv_scenario_statements(
        CsvScenario(name="Bulk 1", type="POST"), ResponseContract(), ()
    )

    script = render_script(statements)

    assert 'test("Bulk 1 - Scenario Type: POST", function () {' in script
    assert 'console.log("Response Time:", res.getResponseTime());' in script
