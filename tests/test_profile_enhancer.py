from conftest import ADA

from skillvector.schemas.profile import Profile
from skillvector.services.profile_enhancer import (
    enhance_profile,
    extract_email,
    extract_experience,
    extract_location,
    extract_name,
    extract_role,
    extract_skills,
)


def test_from_record_normalizes_aliases_and_extras():
    profile = Profile.from_record(
        {"Name": " Grace Hopper ", "experience_years": "12", "skills": "COBOL, Compilers ", "team": "Navy"}
    )
    assert profile.name == "Grace Hopper"
    assert profile.skills == ["COBOL", "Compilers"]
    assert profile.experience_years() == 12.0
    assert profile.extra == {"team": "Navy"}


def test_missing_fields_gate():
    profile = Profile.from_record({k: v for k, v in ADA.items() if k != "skills"})
    assert profile.missing_fields() == ["skills"]
    assert not profile.is_ingestible()
    assert Profile.from_record(ADA).is_ingestible()


def test_placeholder_values_count_as_missing():
    profile = Profile.from_record({**ADA, "location": "Unknown location"})
    assert "location" in profile.missing_fields()


def test_location_patterns():
    assert extract_location("She is a developer from Rome, Italy.") == "Rome, Italy"
    assert extract_location("Currently based in Berlin. Loves jazz.") == "Berlin"
    assert extract_location("Location: Toronto, Canada\nSkills: Go") == "Toronto, Canada"
    assert extract_location("nothing here") is None


def test_location_stops_before_trailing_clause():
    assert extract_location("An engineer from London, UK with 5 years of experience") == "London, UK"


def test_skills_patterns():
    assert extract_skills("Skills: Python, SQL, Docker.") == "Python, SQL, Docker"
    assert extract_skills("He specializes in distributed systems with a focus on Go.") == "distributed systems"
    assert extract_skills("Deep expertise in Rust and C.") == "Rust"


def test_experience_patterns():
    assert extract_experience("has 7 years of professional experience") == 7.0
    assert extract_experience("Experience: 3 years") == 3.0
    assert extract_experience("joined with 10 years in finance") == 10.0
    assert extract_experience("junior") is None


def test_email_name_and_role():
    text = "Marie Curie is a Research Scientist from Paris, France. Contact: marie@example.org"
    assert extract_email(text) == "marie@example.org"
    assert extract_name(text) == "Marie Curie"
    assert extract_role(text) == "Research Scientist"


def test_enhance_fills_only_missing_fields():
    profile = Profile.from_record({"name": "Linus", "role": "Kernel Hacker", "location": "Unknown", "skills": ""})
    text = "Linus lives in Portland. Skills: C, Git. He has 30 years of experience. linus@example.com"
    enhanced = enhance_profile(profile, text)
    assert enhanced.location == "Portland"
    assert enhanced.skills == ["C", "Git"]
    assert enhanced.experience == 30.0
    assert enhanced.email == "linus@example.com"
    assert enhanced.role == "Kernel Hacker"


def test_enhance_keeps_existing_values():
    profile = Profile.from_record({**ADA, "email": "ada@example.com"})
    enhanced = enhance_profile(profile, "Works in Paris. Skills: Cooking. other@example.com")
    assert enhanced.location == "London, UK"
    assert enhanced.email == "ada@example.com"


def test_enhance_fills_description_for_free_text_only():
    profile = Profile.from_record({k: v for k, v in ADA.items() if k != "description"})
    text = "Ada writes notes on the Analytical Engine.\n\nSecond paragraph."
    assert enhance_profile(profile, text).description == ""
    assert enhance_profile(profile, text, fill_description=True).description == (
        "Ada writes notes on the Analytical Engine."
    )
