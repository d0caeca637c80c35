"""Unit tests for the outreach kit generator."""

import json

import pytest

from jobboard.outreach import generate_outreach_kit, parse_kit, template_kit

PROFILE = {"candidate": {"name": "Jordan"}}


def test_template_kit_without_key(make_raw):
    kit = generate_outreach_kit(make_raw(title="ESG Analyst", company="Futerra"), PROFILE)
    assert kit.generated_by == "template"
    assert kit.linkedin_message.startswith("Hi, I'm Jordan")
    assert "ESG Analyst role at Futerra" in kit.linkedin_message
    assert len(kit.resume_bullets) == 3


def test_template_kit_defaults(make_raw):
    kit = template_kit(make_raw(title="", company=""))
    assert "the open role at your company" in kit.linkedin_message
    assert "Alexis" in kit.linkedin_message


def test_parse_kit():
    reply = "Here you go:\n" + json.dumps({
        "linkedin_message": " Hello there. ",
        "resume_bullets": ["One", "Two", "Three"],
    })
    kit = parse_kit(reply)
    assert kit.generated_by == "ai"
    assert kit.linkedin_message == "Hello there."
    assert kit.resume_bullets == ["One", "Two", "Three"]


@pytest.mark.parametrize("reply", ["", "no json", '{"linkedin_message": "hi"}', '{"resume_bullets": []}'])
def test_parse_kit_rejects_incomplete_replies(reply):
    with pytest.raises(ValueError):
        parse_kit(reply)


def test_ai_kit_with_key(monkeypatch, make_raw):
    monkeypatch.setenv("GROQ_API_KEY", "gsk_test")
    prompts = []

    def fake_call(api_key, model, prompt):
        prompts.append(prompt)
        return json.dumps({"linkedin_message": "Hi!", "resume_bullets": ["a", "b", "c"]})

    monkeypatch.setattr("jobboard.outreach._call_groq", fake_call)

    kit = generate_outreach_kit(make_raw(title="ESG Analyst", company="Futerra"), PROFILE)
    assert kit.generated_by == "ai"
    assert kit.linkedin_message == "Hi!"
    assert "Job Title: ESG Analyst" in prompts[0]
    assert "outreach kit for Jordan" in prompts[0]


def test_ai_failure_falls_back_to_template(monkeypatch, make_raw):
    monkeypatch.setenv("GROQ_API_KEY", "gsk_test")

    def fake_call(api_key, model, prompt):
        raise RuntimeError("503 from upstream")

    monkeypatch.setattr("jobboard.outreach._call_groq", fake_call)

    kit = generate_outreach_kit(make_raw(), PROFILE)
    assert kit.generated_by == "template"
