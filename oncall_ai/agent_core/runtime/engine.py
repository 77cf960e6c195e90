from __future__ import annotations

"""LangGraph runtime engine.

``AgentEngine`` runs the tool-calling loop: a language model proposes tool
calls, the engine checks and executes them, and feeds the results back until
the model answers without tools.

Execution model
--------------

- The engine runs a LangGraph state machine over a mutable ``_GraphState``.
- ``boundary`` enforces the iteration and wall-clock limits.
- ``call_llm`` asks the provider for the next step.
- ``process_tools`` handles the requested tool calls sequentially.

Tool calls
----------

For each call in a batch the engine:

1. Evaluates guardrails (and the file-read-before-write invariant for tools
   that write files). A blocked call becomes a tool error for the model and
   the rest of the batch is skipped; the run continues.
2. Pauses the run if the tool is ``destructive``. Calls after it in the batch
   are not processed.
3. Otherwise executes the tool and appends its (sanitized) result.

Pause/resume
------------

A paused ``AgentState`` is plain data. ``resume_after_approval`` applies a
human decision to it, possibly in another process, and continues the loop.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from langgraph.graph import END, StateGraph

from ..schemas.domain import (
    AgentEvent,
    AgentEventType,
    AgentState,
    AgentStatus,
    LLMMessage,
    PendingApproval,
    ToolCall,
    ToolCallRecord,
    ToolContext,
    ToolResult,
    ToolRiskTier,
)
from ..tools.base import ToolDefinition
from .invariants import (
    missing_files_message,
    record_file_read,
    record_listed_files,
    validate_pr_files_were_read,
)
from .models import EngineDeps, LoopConfig, _GraphState

logger = logging.getLogger(__name__)

Observer = Callable[[AgentEvent], None]

SKIPPED_AFTER_BLOCK = "Skipped: an earlier tool call in this batch was blocked. Re-issue it if still needed."
SKIPPED_AFTER_PAUSE = "Skipped: this call was requested together with an action that needed approval. Re-issue it if still needed."
READ_BEFORE_WRITE_SAME_BATCH = (
    "Blocked: files cannot be written in the same turn they are read. "
    "Wait for the file read results first, then resubmit the change with the full updated content."
)


def rejection_message(tool_name: str, reason: Optional[str]) -> str:
    detail = f": {reason}" if reason else ""
    return f'Action "{tool_name}" was rejected by the reviewer{detail}. Please suggest an alternative approach.'


class AgentEngine:
    """Run the tool-calling loop with guardrails and approval gating.

    The engine holds no per-run state between calls; everything needed to
    continue a run lives in ``AgentState``.
    """

    def __init__(self, *, deps: EngineDeps, config: Optional[LoopConfig] = None) -> None:
        """
        Initialize the AgentEngine.

        Args:
            deps: Tool registry, LLM provider, guardrails and clock.
            config: Loop limits and model options.
        """
        self._deps = deps
        self._cfg = config or LoopConfig()
        self._graph = self._build_graph()

    @property
    def config(self) -> LoopConfig:
        return self._cfg

    def _build_graph(self):
        """Build and compile the LangGraph state machine."""
        g: StateGraph = StateGraph(_GraphState)
        g.add_node("boundary", self._node_boundary)
        g.add_node("call_llm", self._node_call_llm)
        g.add_node("process_tools", self._node_process_tools)

        g.set_entry_point("boundary")
        g.add_conditional_edges("boundary", self._route_after_boundary, {"llm": "call_llm", "stop": END})
        g.add_conditional_edges("call_llm", self._route_after_llm, {"tools": "process_tools", "stop": END})
        g.add_conditional_edges(
            "process_tools",
            self._route_after_tools,
            {"continue": "boundary", "stop": END},
        )
        return g.compile()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def new_state(
        self,
        user_input: str,
        *,
        run_id: Optional[str] = None,
        history: Optional[Sequence[LLMMessage]] = None,
    ) -> AgentState:
        """Create a RUNNING state: system prompt, optional prior turns, then the user input."""
        messages = [LLMMessage(role="system", content=self._cfg.system_prompt)]
        messages.extend(history or [])
        messages.append(LLMMessage(role="user", content=user_input))
        return AgentState(run_id=run_id, messages=messages)

    async def run(
        self,
        user_input: str,
        *,
        run_id: Optional[str] = None,
        context: Optional[ToolContext] = None,
        history: Optional[Sequence[LLMMessage]] = None,
        observer: Optional[Observer] = None,
    ) -> AgentState:
        """Start a run and drive it until it completes, fails, or pauses."""
        state = self.new_state(user_input, run_id=run_id, history=history)
        return await self._drive(state, context=context, observer=observer)

    async def resume_after_approval(
        self,
        state: AgentState,
        approved: bool,
        *,
        reason: Optional[str] = None,
        context: Optional[ToolContext] = None,
        observer: Optional[Observer] = None,
    ) -> AgentState:
        """
        Apply a human decision to a paused run and continue the loop.

        Approved: the pending call runs once with its recorded arguments.
        Guardrails are not re-evaluated; the reviewer saw those exact arguments.
        Rejected: the model receives the rejection (with ``reason``) as the
        call's result and may choose another approach.

        Raises:
            ValueError: If the state is not paused with a pending approval.
        """
        pending = self._require_pending(state)
        ctx = self._context_for(state, context)

        if approved:
            logger.info(f"Run {state.run_id}: executing approved tool '{pending.tool_name}'")
            result = await self._deps.registry.execute(pending.tool_name, dict(pending.tool_args), ctx)
            self._apply_result(
                state,
                ToolCall(id=pending.tool_call_id, name=pending.tool_name, args=dict(pending.tool_args)),
                self._deps.registry.definition(pending.tool_name),
                result,
                observer,
            )
        else:
            logger.info(f"Run {state.run_id}: tool '{pending.tool_name}' rejected")
            self._append_tool_message(
                state,
                pending.tool_call_id,
                pending.tool_name,
                rejection_message(pending.tool_name, reason),
            )

        for call in pending.remaining_tool_calls:
            self._append_tool_message(state, call.id, call.name, SKIPPED_AFTER_PAUSE)

        state.pending_approval = None
        state.status = AgentStatus.running
        state.iterations += 1
        return await self._drive(state, context=ctx, observer=observer)

    def close_out_rejected(
        self,
        state: AgentState,
        *,
        reason: Optional[str] = None,
        observer: Optional[Observer] = None,
    ) -> AgentState:
        """Record a rejection in the transcript and fail the run without calling the model."""
        pending = self._require_pending(state)
        self._append_tool_message(
            state, pending.tool_call_id, pending.tool_name, rejection_message(pending.tool_name, reason)
        )
        for call in pending.remaining_tool_calls:
            self._append_tool_message(state, call.id, call.name, SKIPPED_AFTER_PAUSE)
        state.pending_approval = None
        detail = f": {reason}" if reason else ""
        self._fail(state, f"Approval rejected for '{pending.tool_name}'{detail}", observer)
        return state

    def fail_expired(self, state: AgentState, *, observer: Optional[Observer] = None) -> AgentState:
        """Fail a paused run whose approval window closed. Nothing is executed."""
        pending = self._require_pending(state)
        self._append_tool_message(
            state,
            pending.tool_call_id,
            pending.tool_name,
            f'Approval for "{pending.tool_name}" expired before a decision was made. The action was not run.',
        )
        for call in pending.remaining_tool_calls:
            self._append_tool_message(state, call.id, call.name, SKIPPED_AFTER_PAUSE)
        state.pending_approval = None
        self._fail(state, "Approval request expired", observer)
        return state

    # ------------------------------------------------------------------
    # Graph nodes
    # ------------------------------------------------------------------

    async def _drive(
        self,
        state: AgentState,
        *,
        context: Optional[ToolContext],
        observer: Optional[Observer],
    ) -> AgentState:
        graph_state: _GraphState = {
            "agent": state,
            "context": self._context_for(state, context),
            "deadline": self._deps.clock() + self._cfg.timeout_seconds,
            "observer": observer,
        }
        recursion_limit = 3 * (self._cfg.max_iterations + 1) + 5
        final = await self._graph.ainvoke(graph_state, config={"recursion_limit": recursion_limit})
        return final["agent"]

    async def _node_boundary(self, state: _GraphState) -> _GraphState:
        """Fail the run when the iteration budget or the deadline is exhausted."""
        agent = state["agent"]
        observer = state.get("observer")
        if agent.iterations >= self._cfg.max_iterations:
            self._fail(agent, f"Maximum iterations ({self._cfg.max_iterations}) exceeded", observer)
            return state
        if self._deps.clock() > state["deadline"]:
            self._fail(agent, f"Timeout exceeded after {self._cfg.timeout_seconds:g}s", observer)
            return state
        self._emit(AgentEventType.iteration_start, agent, {"iteration": agent.iterations + 1}, observer)
        return state

    async def _node_call_llm(self, state: _GraphState) -> _GraphState:
        """Ask the provider for the next step; a provider error is fatal."""
        agent = state["agent"]
        observer = state.get("observer")
        try:
            response = await self._deps.llm.complete(
                list(agent.messages),
                self._deps.registry.definitions(),
                self._cfg.llm_options(),
            )
        except Exception as e:
            logger.error(f"Run {agent.run_id}: LLM request failed: {e}", exc_info=True)
            self._fail(agent, f"LLM request failed: {e}", observer)
            return state

        self._emit(
            AgentEventType.llm_response,
            agent,
            {"tool_call_count": len(response.tool_calls), "has_content": bool(response.content)},
            observer,
        )

        if not response.tool_calls:
            content = response.content or ""
            agent.messages.append(LLMMessage(role="assistant", content=content))
            agent.result = content
            agent.status = AgentStatus.completed
            self._emit(
                AgentEventType.completed, agent, {"result": content, "iterations": agent.iterations}, observer
            )
            return state

        agent.messages.append(
            LLMMessage(role="assistant", content=response.content or "", tool_calls=list(response.tool_calls))
        )
        state["batch"] = list(response.tool_calls)
        return state

    async def _node_process_tools(self, state: _GraphState) -> _GraphState:
        """Handle one batch of tool calls strictly in order."""
        agent = state["agent"]
        observer = state.get("observer")
        batch = list(state.get("batch") or [])
        state["batch"] = []
        ctx = state["context"]
        registry = self._deps.registry

        definitions = [registry.definition(c.name) for c in batch]
        batch_reads_files = any(d is not None and d.reads_files for d in definitions)

        for idx, (call, definition) in enumerate(zip(batch, definitions)):
            self._emit(
                AgentEventType.tool_call,
                agent,
                {"tool_name": call.name, "tool_call_id": call.id, "args": dict(call.args)},
                observer,
            )

            if definition is None:
                result = await registry.execute(call.name, dict(call.args), ctx)
                self._apply_result(agent, call, None, result, observer)
                continue

            block_reason = self._block_reason(agent, call, definition, batch_reads_files)
            if block_reason is not None:
                logger.info(f"Run {agent.run_id}: tool '{call.name}' blocked: {block_reason}")
                self._apply_result(agent, call, definition, ToolResult.failure(block_reason), observer)
                for skipped in batch[idx + 1 :]:
                    self._append_tool_message(agent, skipped.id, skipped.name, SKIPPED_AFTER_BLOCK)
                break

            if definition.risk_tier == ToolRiskTier.destructive:
                agent.status = AgentStatus.paused
                agent.pending_approval = PendingApproval(
                    tool_call_id=call.id,
                    tool_name=call.name,
                    tool_args=dict(call.args),
                    remaining_tool_calls=list(batch[idx + 1 :]),
                )
                logger.info(f"Run {agent.run_id}: pausing for approval of '{call.name}'")
                self._emit(
                    AgentEventType.approval_required,
                    agent,
                    {"tool_name": call.name, "tool_call_id": call.id, "tool_args": dict(call.args)},
                    observer,
                )
                return state

            result = await registry.execute(call.name, dict(call.args), ctx)
            self._apply_result(agent, call, definition, result, observer)

        agent.iterations += 1
        return state

    def _route_after_boundary(self, state: _GraphState) -> str:
        return "llm" if state["agent"].status == AgentStatus.running else "stop"

    def _route_after_llm(self, state: _GraphState) -> str:
        if state["agent"].status == AgentStatus.running and state.get("batch"):
            return "tools"
        return "stop"

    def _route_after_tools(self, state: _GraphState) -> str:
        return "continue" if state["agent"].status == AgentStatus.running else "stop"

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _block_reason(
        self,
        agent: AgentState,
        call: ToolCall,
        definition: ToolDefinition,
        batch_reads_files: bool,
    ) -> Optional[str]:
        verdict = self._deps.guardrails.check_tool_safety(
            call.name, call.args, cost_estimate=definition.cost_estimate
        )
        if not verdict.allowed:
            return f"Blocked by safety guardrails: {verdict.block_reason()}"

        if definition.writes_files:
            if batch_reads_files:
                return READ_BEFORE_WRITE_SAME_BATCH
            validation = validate_pr_files_were_read(
                call.args, agent.successfully_read_files, agent.known_existing_files
            )
            if not validation.valid:
                return missing_files_message(validation)
        return None

    def _apply_result(
        self,
        agent: AgentState,
        call: ToolCall,
        definition: Optional[ToolDefinition],
        result: ToolResult,
        observer: Optional[Observer],
    ) -> None:
        if self._cfg.sanitize_tool_output:
            result = result.model_copy(
                update={
                    "output": self._deps.guardrails.sanitize_output(result.output),
                    "error": self._deps.guardrails.sanitize_output(result.error) if result.error else result.error,
                }
            )

        if result.success and definition is not None:
            self._track_files(agent, call, definition, result)

        agent.tool_call_history.append(
            ToolCallRecord(
                iteration=agent.iterations,
                tool_call_id=call.id,
                tool_name=call.name,
                args=dict(call.args),
                result=result,
            )
        )
        self._append_tool_message(agent, call.id, call.name, result.as_message_content())
        self._emit(
            AgentEventType.tool_result,
            agent,
            {
                "tool_name": call.name,
                "tool_call_id": call.id,
                "success": result.success,
                "error": result.error,
                "output_preview": result.output[:200],
            },
            observer,
        )

    def _track_files(self, agent: AgentState, call: ToolCall, definition: ToolDefinition, result: ToolResult) -> None:
        meta: Dict[str, Any] = result.metadata or {}
        repo = meta.get("repo", call.args.get("repo"))
        if definition.reads_files:
            path = meta.get("path", call.args.get("path"))
            if repo and path:
                record_file_read(agent, repo, path)
        if definition.lists_files and repo:
            record_listed_files(agent, repo, [str(p) for p in meta.get("paths") or []])

    @staticmethod
    def _append_tool_message(agent: AgentState, tool_call_id: str, tool_name: str, content: str) -> None:
        agent.messages.append(
            LLMMessage(role="tool", content=content, tool_call_id=tool_call_id, tool_name=tool_name)
        )

    @staticmethod
    def _require_pending(state: AgentState) -> PendingApproval:
        if state.status != AgentStatus.paused or state.pending_approval is None:
            raise ValueError("run is not paused for approval")
        return state.pending_approval

    @staticmethod
    def _context_for(state: AgentState, context: Optional[ToolContext]) -> ToolContext:
        if context is None:
            return ToolContext(run_id=state.run_id)
        if context.run_id is None and state.run_id is not None:
            return context.model_copy(update={"run_id": state.run_id})
        return context

    def _fail(self, agent: AgentState, error: str, observer: Optional[Observer]) -> None:
        agent.status = AgentStatus.failed
        agent.error = error
        logger.warning(f"Run {agent.run_id} failed: {error}")
        self._emit(AgentEventType.failed, agent, {"error": error, "iterations": agent.iterations}, observer)

    @staticmethod
    def _emit(
        event_type: AgentEventType,
        agent: AgentState,
        payload: Dict[str, Any],
        observer: Optional[Observer],
    ) -> None:
        """Deliver one event; observer failures never affect the run."""
        if observer is None:
            return
        try:
            observer(AgentEvent(type=event_type, run_id=agent.run_id, payload=payload))
        except Exception as e:
            logger.warning(f"Observer raised on {event_type.value} event: {e}")
