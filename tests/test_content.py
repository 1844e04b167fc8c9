import json

from GazeOS.services.content import (
    EMPTY_PLACEHOLDER,
    OFFLINE_PLACEHOLDER,
    ContentService,
    build_prompt,
    format_content,
    load_generator,
)


def test_prompts_per_app():
    assert "emails" in build_prompt("mail")
    assert "weather report" in build_prompt("weather")
    assert '"hello"' in build_prompt("assistant", "hello")
    assert "an app named system" in build_prompt("system")


def test_generator_output_is_returned_verbatim():
    prompts = []

    def gen(prompt):
        prompts.append(prompt)
        return '{"temp": "21C"}'

    assert ContentService(gen).generate("weather") == '{"temp": "21C"}'
    assert prompts == [build_prompt("weather")]


def test_failure_becomes_placeholder():
    def gen(_prompt):
        raise ConnectionError("offline")

    text = ContentService(gen).generate("mail")
    assert text == OFFLINE_PLACEHOLDER
    assert json.loads(text) == {"error": "Comms Offline"}


def test_missing_generator_is_offline():
    assert ContentService().generate("mail") == OFFLINE_PLACEHOLDER


def test_empty_payload():
    assert ContentService(lambda _p: "").generate("system") == EMPTY_PLACEHOLDER


def test_request_runs_in_background():
    got = []
    t = ContentService(lambda _p: "hi").request("assistant", lambda app_id, text: got.append((app_id, text)))
    t.join(timeout=5)
    assert got == [("assistant", "hi")]


def test_json_apps_are_pretty_printed():
    text = format_content("weather", '{"temp": "21C", "condition": "Clear"}')
    assert text == '{\n  "temp": "21C",\n  "condition": "Clear"\n}'
    assert json.loads(format_content("mail", '[{"from": "HQ"}]')) == [{"from": "HQ"}]


def test_unparseable_json_is_shown_raw():
    assert format_content("mail", "not json") == "not json"
    assert format_content("weather", EMPTY_PLACEHOLDER) == EMPTY_PLACEHOLDER


def test_text_apps_are_quoted_without_inner_quotes():
    assert format_content("assistant", '"All systems nominal."') == '"All systems nominal."'
    assert format_content("system", 'say "hi"') == '"say hi"'


def test_load_generator_resolves_reference():
    assert load_generator("json:dumps") is json.dumps


def test_load_generator_unresolvable_stays_offline():
    assert load_generator(None) is None
    assert load_generator("") is None
    assert load_generator("gazeos_missing_module:gen") is None
    assert load_generator("json:no_such_function") is None
    assert ContentService(load_generator("json:no_such_function")).generate("mail") == OFFLINE_PLACEHOLDER
