"""Tests for classifying model replies as file envelopes or plain text."""

from tfassist.output_parser import classify_output, parse_agent_output

ENVELOPE = '{"files":[{"path":"main.tf","content":"x"}],"summary":"ok"}'


class TestParseAgentOutput:
    """Test strict decoding of the file envelope."""

    def test_valid_envelope(self):
        result = parse_agent_output(ENVELOPE)
        assert result is not None
        assert result.files[0].path == "main.tf"
        assert result.files[0].content == "x"
        assert result.summary == "ok"

    def test_summary_optional(self):
        result = parse_agent_output('{"files":[{"path":"a.tf","content":""}]}')
        assert result is not None
        assert result.summary == ""

    def test_null_summary_is_empty(self):
        result = parse_agent_output('{"files":[{"path":"main.tf","content":"x"}],"summary":null}')
        assert result is not None
        assert result.summary == ""

    def test_surrounding_whitespace_allowed(self):
        assert parse_agent_output(f"\n  {ENVELOPE}  \n") is not None

    def test_markdown_fenced_is_not_an_envelope(self):
        assert parse_agent_output(f"```json\n{ENVELOPE}\n```") is None

    def test_prose(self):
        assert parse_agent_output("Use an S3 backend with DynamoDB locking.") is None

    def test_empty_string(self):
        assert parse_agent_output("") is None

    def test_non_object_json(self):
        assert parse_agent_output("[1, 2, 3]") is None
        assert parse_agent_output('"files"') is None

    def test_file_missing_content(self):
        assert parse_agent_output('{"files":[{"path":"main.tf"}]}') is None

    def test_unknown_keys_ignored(self):
        result = parse_agent_output('{"files":[{"path":"a.tf","content":"y","mode":"644"}],"extra":1}')
        assert result is not None
        assert result.files[0].content == "y"

    def test_multiline_content_preserved(self):
        text = '{"files":[{"path":"main.tf","content":"resource \\"a\\" \\"b\\" {\\n}\\n"}]}'
        result = parse_agent_output(text)
        assert result.files[0].content == 'resource "a" "b" {\n}\n'


class TestClassifyOutput:
    """Test the workspace gate and empty-file fallback."""

    def test_structured_with_workspace(self):
        result = classify_output(ENVELOPE, "/tmp/ws")
        assert result is not None
        assert len(result.files) == 1

    def test_plain_text_without_workspace(self):
        assert classify_output(ENVELOPE, None) is None
        assert classify_output(ENVELOPE, "") is None

    def test_empty_files_is_plain_text(self):
        assert classify_output('{"files":[],"summary":"nothing"}', "/tmp/ws") is None

    def test_null_summary_is_structured(self):
        result = classify_output('{"files":[{"path":"main.tf","content":"x"}],"summary":null}', "/tmp/ws")
        assert result is not None
        assert result.files[0].path == "main.tf"

    def test_missing_files_is_plain_text(self):
        assert classify_output('{"summary":"nothing"}', "/tmp/ws") is None

    def test_deterministic(self):
        first = classify_output(ENVELOPE, "/tmp/ws")
        second = classify_output(ENVELOPE, "/tmp/ws")
        assert first == second
        assert first.model_dump_json() == second.model_dump_json()
