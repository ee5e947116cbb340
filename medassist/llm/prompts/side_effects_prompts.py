"""Side Effects Prompts - Medication check, symptom analysis and full profiles."""

MEDICATION_CHECK_SYSTEM_PROMPT = (
    "You are a pharmaceutical expert. Identify if a specific, real medication is mentioned."
)

ANALYSIS_SYSTEM_PROMPT = (
    "You are a clinical pharmacist specializing in medication side effects and adverse reactions."
)

PROFILE_SYSTEM_PROMPT = (
    "You are a clinical pharmacologist providing comprehensive side effect profiles for medications."
)


def get_medication_check_prompt(text: str) -> str:
    return f"""Does this text mention a specific medication or drug name? Text: "{text}"

Respond with:
1. The medication name if mentioned
2. "NO_SPECIFIC_MEDICINE" if no specific drug is mentioned
3. "UNKNOWN_MEDICINE" if the mentioned item is not a real pharmaceutical product"""


def get_side_effects_analysis_prompt(text: str) -> str:
    return f"""Analyze the following text for medication side effects information:

"{text}"

Determine if this is:
1. A query about potential side effects of a medication
2. A report of symptoms someone is experiencing
3. A request for side effect management advice

If it's a symptom report, assess:
- Severity of symptoms
- Urgency of medical attention needed
- Possible medication-related causes
- Immediate recommendations

If it's a side effects inquiry, provide:
- Common side effects
- Serious side effects to watch for
- When to seek medical attention
- Risk factors that increase likelihood"""


def get_side_effects_profile_prompt(medication: str) -> str:
    """Full profile, sectioned by frequency band, for one medication."""
    return f"""Provide comprehensive side effects profile for: {medication}

Include:

**Common Side Effects (>10% of patients):**
- List with frequency percentages
- Severity level (mild/moderate)
- Typical onset timing
- Duration and resolution

**Less Common Side Effects (1-10%):**
- Include frequency ranges
- Clinical significance
- Management strategies

**Rare but Serious Side Effects (<1%):**
- Emergency situations requiring immediate medical attention
- Warning signs to watch for
- Risk factors that increase likelihood

**Special Populations:**
- Elderly patients
- Pregnancy and breastfeeding
- Pediatric considerations
- Patients with kidney/liver disease

**Drug-Specific Monitoring:**
- Laboratory tests needed
- Clinical monitoring parameters
- Follow-up schedule recommendations

**When to Contact Healthcare Provider:**
- Immediate emergency situations
- Concerning but non-emergency symptoms
- Routine monitoring needs

Be thorough and evidence-based. Include frequency data where available."""


def get_side_effects_format_system_prompt(language: str) -> str:
    return (
        f"You are a healthcare educator explaining medication side effects to patients in {language}. "
        "Be clear, balanced, and safety-focused."
    )


def get_side_effects_format_prompt(info_json: str, language: str) -> str:
    return f"""Format this side effects information into a clear, helpful patient response in {language}:

{info_json}

Create a well-structured response with:

1. **Overview** - Brief introduction
2. **Common Side Effects** - What most people might experience
3. **Serious Side Effects** - Warning signs that need immediate attention
4. **What to Do** - Practical advice for managing side effects
5. **When to Seek Help** - Clear guidance on when to contact healthcare providers

Use clear headings and bullet points. Make it easy to scan quickly.
Include appropriate urgency indicators (⚠️ for warnings, 🚨 for emergencies).
Always emphasize the importance of medical consultation.

Tone: Reassuring but informative, emphasizing safety without causing panic."""
