from datetime import time

import pytest

from studyplanner.errors import GenerationParseError
from studyplanner.models import DayOfWeek
from studyplanner.utils.parsers import parse_schedule_response, strip_code_fences


def test_parse_plain_array():
    res = parse_schedule_response('[{"dayOfWeek":"Monday","startTime":"09:00","endTime":"11:00","subject":"Math"}]')
    assert len(res) == 1
    assert res[0].day_of_week is DayOfWeek.monday
    assert res[0].start_time == time(9, 0)
    assert res[0].end_time == time(11, 0)
    assert res[0].subject == "Math"


def test_parse_strips_markdown_fences():
    text = '```json\n[{"dayOfWeek":"Tuesday","startTime":"18:00","endTime":"19:30","subject":"Physics"}]\n```'
    res = parse_schedule_response(text)
    assert res[0].day_of_week is DayOfWeek.tuesday
    assert res[0].end_time == time(19, 30)


def test_strip_code_fences_without_language_tag():
    assert strip_code_fences("```\n[]\n```  ") == "[]"


def test_parse_keeps_array_order_and_duplicates():
    text = """[
      {"dayOfWeek":"Friday","startTime":"10:00","endTime":"11:00","subject":"Chem"},
      {"dayOfWeek":"Monday","startTime":"08:00","endTime":"09:00","subject":"Math"},
      {"dayOfWeek":"Monday","startTime":"08:00","endTime":"09:00","subject":"Math"}
    ]"""
    res = parse_schedule_response(text)
    assert [e.subject for e in res] == ["Chem", "Math", "Math"]


def test_parse_accepts_day_case_and_abbreviation():
    text = '[{"dayOfWeek":"sunday","startTime":"9:00","endTime":"10:00","subject":"Art"},' \
           '{"dayOfWeek":"WED","startTime":"07:15","endTime":"08:00","subject":"Bio"}]'
    res = parse_schedule_response(text)
    assert res[0].day_of_week is DayOfWeek.sunday
    assert res[0].start_time == time(9, 0)
    assert res[1].day_of_week is DayOfWeek.wednesday


def test_parse_empty_array():
    assert parse_schedule_response("[]") == []


@pytest.mark.parametrize("text", [
    "Sure! Here is your schedule.",
    "",
    "   ",
    "[{",
])
def test_parse_rejects_non_json(text):
    with pytest.raises(GenerationParseError):
        parse_schedule_response(text)


def test_parse_rejects_non_array():
    with pytest.raises(GenerationParseError, match="array"):
        parse_schedule_response('{"dayOfWeek":"Monday","startTime":"09:00","endTime":"11:00","subject":"Math"}')


@pytest.mark.parametrize("item", [
    '"just a string"',
    '{"dayOfWeek":"Funday","startTime":"09:00","endTime":"11:00","subject":"Math"}',
    '{"dayOfWeek":"Monday","startTime":"9am","endTime":"11:00","subject":"Math"}',
    '{"dayOfWeek":"Monday","startTime":"25:00","endTime":"26:00","subject":"Math"}',
    '{"dayOfWeek":"Monday","startTime":"11:00","endTime":"09:00","subject":"Math"}',
    '{"dayOfWeek":"Monday","startTime":"09:00","endTime":"11:00","subject":"  "}',
    '{"dayOfWeek":"Monday","startTime":"09:00","endTime":"11:00"}',
    '{"dayOfWeek":3,"startTime":"09:00","endTime":"11:00","subject":"Math"}',
])
def test_parse_rejects_invalid_entries(item):
    text = '[{"dayOfWeek":"Monday","startTime":"08:00","endTime":"09:00","subject":"Ok"},' + item + ']'
    with pytest.raises(GenerationParseError, match="entry 1"):
        parse_schedule_response(text)
