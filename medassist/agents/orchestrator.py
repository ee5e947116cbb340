"""
Medical Agent Orchestrator - routes queries to specialist agents.

Pipeline for one query:
1. Image present: run the documentation agent; a readable transcription
   is appended to the query text and the image is dropped
2. Analyze the query with the LLM (type, complexity, agents, entities)
3. Run the selected agents concurrently on a thread pool
4. Merge the answers (pass-through for one, LLM synthesis for several)
5. Remember the exchange per conversation (last 10)

Agents are independent and only make outbound HTTP calls, so a bounded
thread pool is enough; no agent sees another agent's answer.
"""
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from medassist.agents import messages
from medassist.agents.base import AgentContext, AgentInput, AgentResponse, BaseAgent
from medassist.core.config import get_settings
from medassist.core.exceptions import LLMError
from medassist.core.logging_config import get_logger
from medassist.llm.client import LLMClient, get_llm_client
from medassist.llm.parsing import extract_json_object
from medassist.llm.prompts import orchestrator_prompts

logger = get_logger(__name__)

DRUG_AGENT = "DrugInformationAgent"
DOCUMENT_AGENT = "MedicalDocumentationAgent"
EDUCATIONAL_SYSTEM = "EducationalSystem"

MAX_REMEMBERED_TURNS = 10
MAX_REMEMBERED_CONVERSATIONS = 1000
MIN_OCR_CONFIDENCE = 0.3
IMAGE_ONLY_QUERY = "Image analysis request"

QueryType = Literal["medicine", "drug_interaction", "dosage", "side_effects", "medical_documentation", "general"]


class QueryAnalysis(BaseModel):
    """What the analysis call decided about a query."""
    model_config = ConfigDict(populate_by_name=True)

    query_type: QueryType = Field(..., alias="queryType")
    complexity: Literal["simple", "moderate", "complex"]
    required_agents: List[str] = Field(..., alias="requiredAgents")
    priority: int = Field(..., ge=1, le=10)
    medical_entities: List[str] = Field(..., alias="medicalEntities")


def fallback_analysis() -> QueryAnalysis:
    """Used when the analysis call fails or returns invalid JSON."""
    return QueryAnalysis(
        query_type="medicine",
        complexity="moderate",
        required_agents=[DRUG_AGENT],
        priority=5,
        medical_entities=[],
    )


def error_analysis() -> QueryAnalysis:
    return QueryAnalysis(
        query_type="general",
        complexity="simple",
        required_agents=[],
        priority=1,
        medical_entities=[],
    )


@dataclass
class OrchestratorResponse:
    primary_response: str
    agent_responses: List[AgentResponse]
    query_analysis: QueryAnalysis
    confidence: float
    reasoning: List[str] = field(default_factory=list)


class MedicalAgentOrchestrator:
    """
    Central coordinator for the specialist agents.

    Example:
        >>> orchestrator = create_medical_orchestrator()
        >>> result = orchestrator.process_query(
        ...     AgentInput(text="What is Panadol?"),
        ...     AgentContext(conversation_id="abc", language="english"),
        ... )
        >>> result.query_analysis.query_type
        'medicine'
    """

    def __init__(self, llm_client: Optional[LLMClient] = None, max_workers: Optional[int] = None):
        self.llm_client = llm_client or get_llm_client()
        self.max_workers = max_workers or get_settings().agent_workers
        self._agents: Dict[str, BaseAgent] = {}
        self._memory: Dict[str, List[AgentContext]] = {}
        self._memory_lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="agent")
        logger.info(f"Medical agent orchestrator initialized (workers={self.max_workers})")

    def register_agent(self, agent: BaseAgent) -> None:
        self._agents[agent.name] = agent
        logger.info(f"Registered agent: {agent.name}")

    def registered_agents(self) -> List[str]:
        return list(self._agents.keys())

    def get_agent(self, name: str) -> Optional[BaseAgent]:
        return self._agents.get(name)

    def get_agents_info(self) -> List[Dict]:
        return [agent.get_info() for agent in self._agents.values()]

    def get_conversation_history(self, conversation_id: str) -> List[AgentContext]:
        with self._memory_lock:
            return list(self._memory.get(conversation_id, []))

    def forget_conversation(self, conversation_id: str) -> bool:
        """Drop the remembered turns of one conversation."""
        with self._memory_lock:
            return self._memory.pop(conversation_id, None) is not None

    def clear_memory(self) -> int:
        """Drop every remembered conversation; returns how many there were."""
        with self._memory_lock:
            count = len(self._memory)
            self._memory.clear()
        if count:
            logger.info(f"Cleared agent memory for {count} conversations")
        return count

    def remembered_conversations(self) -> int:
        with self._memory_lock:
            return len(self._memory)

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False)

    def process_query(self, agent_input: AgentInput, context: AgentContext) -> OrchestratorResponse:
        """
        Answer one user query.

        Never raises: any failure produces an apology with confidence 0.
        """
        try:
            query_text = agent_input.text or ""
            processed_input = agent_input

            if agent_input.has_image:
                query_text, processed_input = self._run_document_step(agent_input, context, query_text)

            analysis = self.analyze_query(query_text or IMAGE_ONLY_QUERY, context)
            logger.info(
                f"Query analysis: type={analysis.query_type}, agents={analysis.required_agents}, "
                f"priority={analysis.priority}"
            )

            responses = self.route_to_agents(analysis, processed_input, context)
            response_text, confidence, reasoning = self.synthesize_responses(responses, analysis, context)
            self._remember(context, responses)

            return OrchestratorResponse(
                primary_response=response_text,
                agent_responses=responses,
                query_analysis=analysis,
                confidence=confidence,
                reasoning=reasoning,
            )

        except Exception as e:
            logger.error(f"Error processing query: {e}", exc_info=True)
            return OrchestratorResponse(
                primary_response=messages.ORCHESTRATOR_ERROR,
                agent_responses=[],
                query_analysis=error_analysis(),
                confidence=0.0,
                reasoning=["Error occurred during processing"],
            )

    def _run_document_step(
        self,
        agent_input: AgentInput,
        context: AgentContext,
        query_text: str
    ) -> Tuple[str, AgentInput]:
        doc_agent = self._agents.get(DOCUMENT_AGENT)
        if doc_agent is None:
            return query_text, agent_input

        logger.info("Image detected, running document OCR first")
        ocr_response = doc_agent.process(agent_input, context)

        if ocr_response.confidence > MIN_OCR_CONFIDENCE and ocr_response.metadata.get("is_ocr_result"):
            logger.info("OCR successful, continuing with transcribed text")
            combined = f"{query_text}\n\n{ocr_response.response}".strip()
            return combined, AgentInput(text=combined)

        logger.info("OCR confidence low or failed, continuing with original input")
        return query_text, agent_input

    def analyze_query(self, query_text: str, context: AgentContext) -> QueryAnalysis:
        try:
            reply = self._call_analysis_llm(
                orchestrator_prompts.get_query_analysis_prompt(query_text), context
            )
            return QueryAnalysis.model_validate(extract_json_object(reply))
        except (LLMError, ValueError) as e:
            logger.warning(f"Query analysis failed, using fallback: {e}")
            return fallback_analysis()

    def route_to_agents(
        self,
        analysis: QueryAnalysis,
        agent_input: AgentInput,
        context: AgentContext
    ) -> List[AgentResponse]:
        """Run every selected agent that accepts the query, concurrently."""
        required = list(analysis.required_agents)

        if agent_input.has_image and DOCUMENT_AGENT not in required and DRUG_AGENT not in required:
            logger.info("Image provided, adding DrugInformationAgent for pill identification")
            required.append(DRUG_AGENT)

        selected: List[str] = []
        for name in required:
            if name not in self._agents:
                logger.info(f"Agent {name} not found, using {DRUG_AGENT} instead")
                name = DRUG_AGENT
            if name not in selected:
                selected.append(name)

        query_text = agent_input.text or ""
        futures: List[Tuple[str, Future]] = []
        for name in selected:
            agent = self._agents.get(name)
            if agent is None:
                continue
            should_force = name == DRUG_AGENT and self._should_force_drug_agent(query_text, analysis)
            if agent.can_handle(query_text, context) or should_force:
                futures.append((name, self._executor.submit(agent.process, agent_input, context)))

        responses: List[AgentResponse] = []
        for name, future in futures:
            try:
                response = future.result()
            except Exception as e:
                logger.error(f"Agent {name} failed: {e}", exc_info=True)
                continue
            if response.response.strip():
                responses.append(response)

        if not responses:
            if self.is_medical_advice_request(query_text, context):
                responses.append(AgentResponse(
                    agent_name=EDUCATIONAL_SYSTEM,
                    response=messages.localized(messages.MEDICAL_ADVICE_NOTICE, context.language),
                    confidence=1.0,
                    metadata={"queryType": "rejected_medical_advice"},
                ))
            else:
                responses.append(AgentResponse(
                    agent_name=EDUCATIONAL_SYSTEM,
                    response=messages.localized(messages.GENERAL_FALLBACK, context.language),
                    confidence=0.3,
                    metadata={"queryType": "unrecognized_query"},
                ))

        return responses

    @staticmethod
    def _should_force_drug_agent(query_text: str, analysis: QueryAnalysis) -> bool:
        if not query_text.strip():
            return False
        return (
            analysis.query_type == "medicine"
            or DRUG_AGENT in analysis.required_agents
            or any(entity.strip() for entity in analysis.medical_entities)
        )

    def synthesize_responses(
        self,
        responses: List[AgentResponse],
        analysis: QueryAnalysis,
        context: AgentContext
    ) -> Tuple[str, float, List[str]]:
        """
        Returns:
            Tuple of (response_text, confidence, reasoning)
        """
        if not responses:
            return messages.no_responses(analysis.query_type), 0.0, ["No agents available to handle this query"]

        if len(responses) == 1:
            only = responses[0]
            return only.response, only.confidence, [f"Single agent response from {only.agent_name}"]

        prompt = orchestrator_prompts.get_synthesis_prompt(
            analysis.query_type,
            context.language,
            [(r.agent_name, r.confidence, r.response) for r in responses],
        )

        try:
            synthesized = self._call_analysis_llm(prompt, context)
            if not synthesized.strip():
                raise LLMError("Empty synthesis reply")
        except LLMError as e:
            logger.error(f"Response synthesis failed: {e}")
            best = max(responses, key=lambda r: r.confidence)
            return best.response, best.confidence, [f"Fallback to best single agent response: {best.agent_name}"]

        average = sum(r.confidence for r in responses) / len(responses)
        return (
            synthesized,
            round(average, 2),
            [f"Incorporated {r.agent_name} response" for r in responses],
        )

    def is_medical_advice_request(self, query_text: str, context: AgentContext) -> bool:
        trimmed = (query_text or "").strip()
        if not trimmed:
            return False

        try:
            reply = self._call_analysis_llm(
                orchestrator_prompts.get_medical_advice_check_prompt(trimmed), context
            )
        except LLMError as e:
            logger.error(f"Medical advice classification failed: {e}")
            return False

        return reply.strip().upper().startswith("MEDICAL_ADVICE")

    def _call_analysis_llm(self, prompt: str, context: AgentContext) -> str:
        return self.llm_client.generate(
            prompt,
            system_prompt=orchestrator_prompts.get_analysis_system_prompt(context.language),
        ) or ""

    def _remember(self, context: AgentContext, responses: List[AgentResponse]) -> None:
        if not context.conversation_id:
            return

        with self._memory_lock:
            # Re-inserted so the dict stays ordered least recently used first
            history = self._memory.pop(context.conversation_id, [])
            history.append(replace(context, previous_responses=list(responses)))
            if len(history) > MAX_REMEMBERED_TURNS:
                del history[:-MAX_REMEMBERED_TURNS]
            self._memory[context.conversation_id] = history

            while len(self._memory) > MAX_REMEMBERED_CONVERSATIONS:
                del self._memory[next(iter(self._memory))]
