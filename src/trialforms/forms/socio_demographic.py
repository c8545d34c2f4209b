"""Socio-demographic baseline questionnaire.

Collected once per participant at enrolment. Most questions are single
choice; religion specification becomes mandatory only for participants who
practise a religion, and the two count fields are optional but range-checked
whenever they are answered.
"""

from types import MappingProxyType
from typing import Any, Dict, Mapping

from trialforms.forms.session import FormDefinition
from trialforms.validation.common_rules import COMMON_RULES, required_choice
from trialforms.validation.rules import AgeRule, DateRule, TextRule

FORM_NAME = "socio_demographic"

FIELDS = (
    "age",
    "gender",
    "maritalStatus",
    "numberOfChildren",
    "knowledgeIn",
    "faithContributeToWellBeing",
    "practiceAnyReligion",
    "religionSpecify",
    "educationLevel",
    "employmentStatus",
    "cancerDiagnosis",
    "stageOfCancer",
    "scoreOfECOG",
    "typeOfTreatment",
    "treatmentStartDate",
    "durationOfTreatmentMonths",
    "otherMedicalConditions",
    "currentMedications",
    "smokingHistory",
    "alcoholConsumption",
    "physicalActivityLevel",
    "stressLevels",
    "technologyExperience",
    "participantSignature",
    "consentDate",
)

INITIAL_DATA: Mapping[str, str] = MappingProxyType({name: "" for name in FIELDS})

BASE_RULES: Mapping[str, Any] = MappingProxyType(
    {
        "age": AgeRule(required=True, message="Age must be between 1 and 120 years"),
        "gender": required_choice("Please select your gender"),
        "maritalStatus": required_choice("Please select your marital status"),
        "numberOfChildren": COMMON_RULES["children"],
        "knowledgeIn": required_choice("Please select your knowledge language"),
        "faithContributeToWellBeing": required_choice(
            "Please answer if faith contributes to your well-being"
        ),
        "practiceAnyReligion": required_choice(
            "Please answer if you practice any religion"
        ),
        # Tightened by conditional_rules
        "religionSpecify": TextRule(),
        "educationLevel": required_choice("Please select your education level"),
        "employmentStatus": required_choice("Please select your employment status"),
        "cancerDiagnosis": required_choice("Please select your cancer diagnosis"),
        "stageOfCancer": required_choice("Please select the stage of cancer"),
        "scoreOfECOG": required_choice("Please select your ECOG score"),
        "typeOfTreatment": required_choice("Please select the type of treatment"),
        "treatmentStartDate": DateRule(
            required=True,
            message="Please enter a valid treatment start date (DD-MM-YYYY)",
        ),
        "durationOfTreatmentMonths": COMMON_RULES["treatment_duration"],
        "otherMedicalConditions": TextRule(
            max_length=500,
            message="Other medical conditions must be less than 500 characters",
        ),
        "currentMedications": TextRule(
            max_length=500,
            message="Current medications must be less than 500 characters",
        ),
        "smokingHistory": required_choice("Please select your smoking history"),
        "alcoholConsumption": required_choice("Please select your alcohol consumption"),
        "physicalActivityLevel": required_choice(
            "Please select your physical activity level"
        ),
        "stressLevels": required_choice("Please select your stress levels"),
        "technologyExperience": required_choice(
            "Please select your technology experience"
        ),
        "participantSignature": TextRule(
            required=True, min_length=2, message="Please provide your signature"
        ),
        "consentDate": DateRule(
            required=True, message="Please enter a valid consent date (DD-MM-YYYY)"
        ),
    }
)

RELIGION_SPECIFY_RULE = TextRule(
    required=True, min_length=2, message="Please specify your religion"
)


def conditional_rules(record: Mapping[str, Any]) -> Dict[str, Any]:
    """Rules that depend on answers elsewhere in the record."""
    rules: Dict[str, Any] = {}
    if record.get("practiceAnyReligion") == "Yes":
        rules["religionSpecify"] = RELIGION_SPECIFY_RULE
    if record.get("numberOfChildren"):
        rules["numberOfChildren"] = COMMON_RULES["children"]
    if record.get("durationOfTreatmentMonths"):
        rules["durationOfTreatmentMonths"] = COMMON_RULES["treatment_duration"]
    return rules


SOCIO_DEMOGRAPHIC_FORM = FormDefinition(
    name=FORM_NAME,
    initial_data=INITIAL_DATA,
    base_rules=BASE_RULES,
    conditional_rules=conditional_rules,
)

REQUIRED_FIELDS = tuple(name for name, rule in BASE_RULES.items() if rule.required)
