"""Interaction Prompts - Medication extraction, safety analysis and presentation."""
from typing import List

EXTRACTION_SYSTEM_PROMPT = "You are a medical information extraction specialist."

ANALYSIS_SYSTEM_PROMPT = (
    "You are a clinical pharmacist specializing in drug interactions and medication safety. "
    "Provide accurate, evidence-based analysis."
)


def get_medication_extraction_prompt(text: str) -> str:
    """
    Ask for a line-oriented listing the agent can parse.

    The reply is expected to carry 'Medications:', 'Conditions:', 'Age:'
    and 'Pregnant:' lines.
    """
    return f"""Extract medication names and patient conditions from this text:

"{text}"

Please identify:
1. All medication names mentioned
2. Any medical conditions mentioned
3. Patient demographics (age, pregnancy status if mentioned)

Format as:
Medications: [list]
Conditions: [list]
Age: [if mentioned]
Pregnant: [yes/no if mentioned]"""


def get_interaction_analysis_prompt(
    medications: List[str],
    conditions: List[str],
    patient_info_json: str
) -> str:
    return f"""Analyze the following medication combination for interactions and safety:

Medications: {', '.join(medications)}
Patient Conditions: {', '.join(conditions)}
Patient Info: {patient_info_json}

Provide a comprehensive analysis including:

1. **Drug-Drug Interactions:**
   For each interaction, specify:
   - Medications involved
   - Severity (mild/moderate/severe/contraindicated)
   - Clinical effect and mechanism
   - Management recommendations

2. **Contraindications:**
   - Any medications contraindicated with patient conditions
   - Reasons and severity level

3. **Food/Lifestyle Interactions:**
   - Important dietary restrictions
   - Alcohol interactions
   - Timing considerations

4. **Special Populations:**
   - Age-related considerations
   - Pregnancy/breastfeeding safety
   - Kidney/liver function considerations

5. **Overall Risk Assessment:**
   - Overall risk level (low/moderate/high/critical)
   - Most concerning interactions
   - Immediate actions needed

Be thorough and evidence-based. If no significant interactions exist, state this clearly."""


def get_interaction_format_system_prompt(language: str) -> str:
    return (
        "You are a clinical pharmacist explaining drug interactions to patients. "
        f"Be clear, thorough, and emphasize safety. Format in {language}."
    )


def get_interaction_format_prompt(
    analysis_json: str,
    medications: List[str],
    language: str
) -> str:
    return f"""Format the following drug interaction analysis into a clear, professional response in {language}:

Medications Analyzed: {', '.join(medications)}

Analysis Results:
{analysis_json}

Create a structured response with:
1. **Summary of Analysis**
2. **Key Interactions Found** (if any)
3. **Important Warnings** (if any)
4. **Recommendations**
5. **When to Seek Medical Attention**

Use clear headings and bullet points. Include severity indicators where appropriate.
Always end with a strong medical disclaimer about consulting healthcare providers."""
