"""
Orchestrator Prompts - Query analysis, advice screening and synthesis.

The analysis prompt lists the exact agent names the orchestrator has
registered; anything else the model invents is mapped back to the drug
information agent by the router.
"""
from typing import List, Sequence


def get_analysis_system_prompt(language: str) -> str:
    """System prompt shared by every orchestrator-level LLM call."""
    return (
        "You are a medical query analysis expert helping coordinate specialized medical agents. "
        "Always provide accurate JSON responses when requested. "
        f"Respond in {language}."
    )


def get_query_analysis_prompt(query_text: str) -> str:
    """
    Ask the model to classify a query and pick agents.

    Args:
        query_text: User text, possibly with OCR output appended

    Returns:
        Prompt requesting a JSON object with queryType, complexity,
        requiredAgents, priority and medicalEntities
    """
    return f"""You are a medical query analysis expert. Analyze the following medical query and determine:

1. Query Type: What type of medical information is being requested?
2. Complexity: How complex is this query?
3. Required Agents: Which specialized agents would be needed?
4. Priority: How urgent/important is this query?
5. Medical Entities: What medical terms, drugs, conditions are mentioned?

Available Agent Types (USE ONLY THESE):
- DrugInformationAgent: Medicine identification, drug facts, mechanisms, general medicine questions
- InteractionAgent: Drug interactions, contraindications, warnings
- DosageAgent: Dosage calculations, administration guidelines
- SideEffectsAgent: Side effects analysis, risk assessment
- MedicalDocumentationAgent: Medical documents, prescriptions, certificates, OCR analysis

IMPORTANT: Only use the agent names listed above. For general medical questions about symptoms, conditions, or treatments, use DrugInformationAgent. If the query involves reading a document, always include MedicalDocumentationAgent.

Query: "{query_text}"

Respond with a JSON object matching this schema:
{{
  "queryType": "medicine|drug_interaction|dosage|side_effects|medical_documentation|general",
  "complexity": "simple|moderate|complex",
  "requiredAgents": ["AgentName1", "AgentName2"],
  "priority": 1-10,
  "medicalEntities": ["entity1", "entity2"]
}}"""


def get_medical_advice_check_prompt(query_text: str) -> str:
    """Binary screen: is the user asking what THEY should do?"""
    return f"""Determine whether the user is asking for personalized medical advice (something they should take, dosage for themselves, or treatment guidance for their specific situation).

Query: \"\"\"{query_text}\"\"\"

Respond with one of these labels only:
- MEDICAL_ADVICE
- OTHER"""


def get_synthesis_prompt(
    query_type: str,
    language: str,
    reports: Sequence[tuple]
) -> str:
    """
    Merge several agent answers into one.

    Args:
        query_type: Analysed query type
        language: Response language
        reports: (agent_name, confidence, response) tuples
    """
    sections: List[str] = [
        f"\n--- Report from {name} (Confidence: {confidence * 100:g}%) ---\n{response}"
        for name, confidence, response in reports
    ]
    joined = "\n\n".join(sections)

    return f"""You are a senior medical assistant. Your job is to synthesize reports from several junior specialist agents into a single, coherent, and comprehensive response for the user.

Query Type: {query_type}
Language: {language}

Agent Reports:
{joined}

Your task:
1.  **Synthesize, Do Not Repeat:** Combine the information logically. Start with the most important information. Do not just list the reports.
2.  **Remove Redundancy:** The agents may have overlapping information (like disclaimers). Include a comprehensive disclaimer only once at the end.
3.  **Ensure Natural Flow:** The final response should read as if a single expert wrote it.
4.  **Maintain Accuracy:** Do not add or invent information not present in the agent reports.
5.  **Final Response Language:** The entire final response must be in {language}.

Provide the final synthesized response below:"""
