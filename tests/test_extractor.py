"""Tests for pattern-based field extraction."""

import pytest

from support_intake.conversation.extractor import (
    EMAIL_RULES,
    NAME_RULES,
    extract,
    extract_booking_reference,
    extract_email,
    extract_issue_type,
    extract_name,
    extract_phone,
    extract_preferred_contact,
    extract_urgency,
)
from support_intake.schemas.profile_schema import IssueType, PreferredContact, Urgency


class TestNameExtraction:
    @pytest.mark.parametrize("text, expected", [
        ("my name is Priya", "Priya"),
        ("Hi, I'm Priya, my email is x", "Priya"),
        ("I am rahul sharma", "Rahul Sharma"),
        ("this is Anita from Pune", "Anita"),
        ("you can call me Raj.", "Raj"),
        ("My name is Rahul Sharma and I need help", "Rahul Sharma"),
    ])
    def test_introduction_phrasings(self, text, expected):
        name, tentative = extract_name(text)
        assert name == expected
        assert tentative is False

    def test_bare_phrase_is_tentative(self):
        name, tentative = extract_name("Meera")
        assert name == "Meera"
        assert tentative is True

    def test_bare_phrase_rejects_long_input(self):
        name, _ = extract_name("I would like some information please")
        assert name is None

    @pytest.mark.parametrize("text", [
        "I'm looking for help with a booking",
        "this is about my booking",
        "I'm having trouble",
        "hello",
        "refund",
        "I'm not sure",
        "I'm from Mumbai",
        "I'm unhappy",
        "I'm so sorry",
        "this is from Goa",
        "Check availability",
        "Need assistance",
        "Show details",
        "Goa",
    ])
    def test_stop_words_prevent_false_names(self, text):
        assert extract_name(text)[0] is None

    def test_rejects_single_character(self):
        assert extract_name("my name is J")[0] is None

    def test_rejects_overlong_candidate(self):
        long_name = "A" * 60
        assert extract_name(f"my name is {long_name}")[0] is None

    def test_explicit_rule_wins_over_later_rules(self):
        name, _ = extract_name("my name is Kavya, this is Ravi")
        assert name == "Kavya"

    def test_rule_order_is_explicit(self):
        assert [r.name for r in NAME_RULES] == [
            "my_name_is", "i_am", "this_is", "call_me", "bare_phrase",
        ]

    def test_email_is_not_taken_as_name(self):
        partial = extract("I'm priya@test.com")
        assert partial.name is None
        assert partial.email == "priya@test.com"


class TestEmailExtraction:
    @pytest.mark.parametrize("text", [
        "priya@test.com",
        "my email is priya@test.com",
        "My Email Is PRIYA@TEST.COM.",
        "email: Priya@Test.com, thanks",
        "please contact me on priya@test.com",
        "you can reach me at priya@test.com!",
        "lots of words before priya@test.com and after",
    ])
    def test_valid_address_anywhere_is_lower_cased(self, text):
        assert extract_email(text) == "priya@test.com"

    def test_subdomain_address(self):
        assert extract_email("mail me at a.b+tag@mail.example.co.in") == "a.b+tag@mail.example.co.in"

    def test_explicit_statement_beats_other_address(self):
        text = "send it to ops@villa.com, my email is me@home.in"
        assert extract_email(text) == "me@home.in"

    def test_no_address(self):
        assert extract_email("my email is not handy right now") is None

    def test_rule_order_is_explicit(self):
        assert [r.name for r in EMAIL_RULES] == [
            "my_email_is", "email_mention", "contact_at", "reach_at", "bare_address",
        ]


class TestPhoneExtraction:
    @pytest.mark.parametrize("text, expected", [
        ("call 9876543210", "9876543210"),
        ("my number is +91 98765 43210", "+919876543210"),
        ("+91-98765-43210", "+919876543210"),
        ("98765-43210 is my phone", "9876543210"),
    ])
    def test_indian_mobile(self, text, expected):
        assert extract_phone(text) == expected

    def test_bare_ten_digit_run(self):
        assert extract_phone("reach me on 0123456789") == "0123456789"

    def test_short_number_ignored(self):
        assert extract_phone("room 12345") is None

    def test_digits_inside_code_ignored(self):
        assert extract_phone("code PIC9876543210X") is None


class TestBookingReferenceExtraction:
    @pytest.mark.parametrize("text, expected", [
        ("booking reference PIC482913", "PIC482913"),
        ("my booking ID is bk123456", "BK123456"),
        ("order #ABC123", "ABC123"),
        ("reference: 48291355", "48291355"),
        ("booking number: 123456", "123456"),
    ])
    def test_reference_after_keyword(self, text, expected):
        assert extract_booking_reference(text) == expected

    def test_plain_word_is_not_a_reference(self):
        assert extract_booking_reference("my booking problem") is None

    def test_too_short(self):
        assert extract_booking_reference("booking AB12") is None

    def test_no_keyword(self):
        assert extract_booking_reference("PIC482913") is None


class TestIssueTypeExtraction:
    @pytest.mark.parametrize("text, expected", [
        ("problem with my reservation", IssueType.BOOKING),
        ("I want a refund", IssueType.PAYMENT),
        ("I was charged", IssueType.PAYMENT),
        ("is the venue near the beach", IssueType.PROPERTY),
        ("I forgot my password", IssueType.ACCOUNT),
        ("cannot log in", IssueType.ACCOUNT),
    ])
    def test_keyword_categories(self, text, expected):
        assert extract_issue_type(text) == expected

    def test_first_category_wins(self):
        assert extract_issue_type("refund for my booking") == IssueType.BOOKING

    def test_no_match_leaves_unset(self):
        assert extract_issue_type("just saying hello") is None

    def test_whole_words_only(self):
        assert extract_issue_type("discharge summary") is None


class TestUrgencyExtraction:
    @pytest.mark.parametrize("text, expected", [
        ("this is urgent", Urgency.HIGH),
        ("EMERGENCY please", Urgency.HIGH),
        ("need it asap", Urgency.HIGH),
        ("check-in is today", Urgency.MEDIUM),
        ("need it soon", Urgency.MEDIUM),
    ])
    def test_levels(self, text, expected):
        assert extract_urgency(text) == expected

    def test_high_is_never_downgraded_in_same_utterance(self):
        assert extract_urgency("today, and it's urgent") == Urgency.HIGH

    def test_unset_by_default(self):
        assert extract_urgency("whenever works") is None


class TestPreferredContact:
    def test_email_preference(self):
        assert extract_preferred_contact("please contact me via email") == PreferredContact.EMAIL

    def test_phone_preference(self):
        assert extract_preferred_contact("I prefer phone") == PreferredContact.PHONE

    def test_none(self):
        assert extract_preferred_contact("thanks") is None


class TestExtractAll:
    def test_combined_utterance(self):
        partial = extract("Hi, I'm Priya, my email is priya@test.com, urgent refund issue")
        assert partial.name == "Priya"
        assert partial.email == "priya@test.com"
        assert partial.issue_type == IssueType.PAYMENT
        assert partial.urgency == Urgency.HIGH
        assert partial.phone is None
        assert partial.tentative == frozenset()

    def test_location_supplement(self):
        partial = extract("looking for a villa in goa")
        assert partial.location == "Goa"
        assert partial.issue_type is None

    def test_empty_profile_for_small_talk(self):
        partial = extract("I have a question about something")
        assert partial.known_fields() == {}

    def test_deterministic(self):
        text = "booking reference PIC482913, call 9876543210"
        assert extract(text) == extract(text)
