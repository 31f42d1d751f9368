"""Configuration scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_FILENAME = "config.yaml"

_CONFIG_SCAFFOLD_TEMPLATE = """# Generation configuration template for bruno-collection-generator.
# Replace every <REQUIRED> placeholder before running generate.
# Replace <OPTIONAL> placeholders only when your setup needs them.

collectionName: "<REQUIRED>"

# Top-level request template; its payload is corrupted for the negative scenario.
apiUrl: "<OPTIONAL>"
method: "POST"
# requestPayload: {"TXLife": {"TXLifeRequest": {"TransRefGUID": "<OPTIONAL>"}}}

auth:
  # One of none, basic, bearer.
  type: "none"
  # username: "<OPTIONAL>"
  # password: "<OPTIONAL>"
  # token: "<OPTIONAL>"

dbConfig:
  # Either server/database/user/password or a jdbcUrl with username/password.
  server: "<REQUIRED>"
  database: "<REQUIRED>"
  user: "<REQUIRED>"
  password: "<REQUIRED>"
  # jdbcUrl: "jdbc:sqlserver://host:1433;databaseName=NAME"

dbQueries:
  # Each query must return two columns aliased VALUE and KEY.
  - name: "<REQUIRED>"
    endpoint: "/client-data"
    method: "GET"
    variableName: "<REQUIRED>"
    description: "<OPTIONAL>"
    # Path and query parameters are bound positionally to %s placeholders
    # (pymssql), in the order of params, or of the endpoint path when absent.
    # params: ["clientId"]
    query: "SELECT MAX(ID) AS VALUE, 'ExistentClient' AS KEY FROM <REQUIRED>"

variableGenerators:
  # type: currentDate, currentDateTime, futurePastDate, conditionalDate,
  #       correlationId, randomNumber, randomString, timestamp
  - name: "<REQUIRED>"
    type: "currentDate"
    format: "MMddyyyy"

scenarios:
  # url and request may reference {{variableName}} placeholders.
  - name: "<REQUIRED>"
    url: "<REQUIRED>"
    method: "GET"
    request: "<OPTIONAL>"

# csvScenariosFile: "<OPTIONAL>"  # CSV with a name,type,requestBody header
csvScenarios: []

assertions:
  # type: status, responseTime, jsonPath, body
  - type: "status"
    expected: "200"
    description: "Status Code should be 200"

# responseContract:
#   transactionRefPath: "TXLife.TXLifeResponse.TransRefGUID"
#   resultCodePath: "TXLife.TXLifeResponse.TransResult.ResultCode.@tc"
#   successValue: "1"
"""


def build_placeholder_configuration() -> str:
    """Build a YAML generation configuration template with placeholders and inline guidance."""
    return _CONFIG_SCAFFOLD_TEMPLATE


def write_placeholder_configuration(output_path: Path | str) -> Path:
    """Write the placeholder generation configuration to the requested output path.

    Args:
      output_path: Destination file path for the scaffold.

    Returns:
      The resolved destination path.

    Raises:
      FileExistsError: If the destination file already exists.
      OSError: If writing the scaffold fails.
    """
    destination = Path(output_path)
    if destination.exists():
        raise FileExistsError(f"Configuration file already exists: {destination.resolve()}")
    destination.write_text(build_placeholder_configuration(), encoding="utf-8")
    return destination.resolve()
