"""Tool-use loop: ask the model, run the tools it requests, feed results back, repeat."""

from __future__ import annotations

import json
import logging
from typing import Sequence

import httpx

from autofound.agent.providers import (
    BaseProvider,
    load_provider,
)
from autofound.agent.tool_executor import execute_tool
from autofound.config import settings
from autofound.core.schema import (
    MAX_ITERATIONS_TEXT,
    NO_RESPONSE_TEXT,
    ChatMessage,
    LoopResult,
    ToolCallRecord,
    provider_for_model,
)
from autofound.tools import ToolDefinition

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Agent Loop
# ---------------------------------------------------------------------------
class ToolLoop:
    """
    Drive one provider until the model answers in plain text or the iteration cap is hit.

    Every iteration is exactly one provider round-trip.  Requested tools run sequentially in the
    order the provider listed them and stay executed even if a later round-trip fails.
    """

    def __init__(self, provider: BaseProvider, max_iterations: int | None = None) -> None:
        self.provider = provider
        self.max_iterations = settings.MAX_TOOL_ITERATIONS if max_iterations is None else max_iterations

    def run(
        self,
        api_key: str,
        model: str,
        system_prompt: str,
        history: Sequence[ChatMessage],
        tools: Sequence[ToolDefinition],
    ) -> LoopResult:
        """
        Run the loop to a terminal state.

        Raises
        ------
        ProviderError
            If a round-trip fails.  Nothing else escapes: tool failures are fed back to the model
            and running out of iterations returns ``"(max tool iterations reached)"``.
        """
        conversation = self.provider.start_conversation(system_prompt, history)
        trace: list[ToolCallRecord] = []

        for iteration in range(self.max_iterations):
            logger.debug(
                "%s round-trip %d/%d (model=%s)",
                self.provider.display_name,
                iteration + 1,
                self.max_iterations,
                model,
            )
            step = self.provider.step(api_key, model, system_prompt, conversation, tools)
            if step.finished:
                return LoopResult(text=step.text or NO_RESPONSE_TEXT, tool_calls=trace)

            logger.info(
                "Model requested %d tool calls: %s",
                len(step.tool_calls),
                [call.name for call in step.tool_calls],
            )
            results: list[str] = []
            for call in step.tool_calls:
                result = call.error or execute_tool(call.name, call.args, tools)
                args = call.raw_args if call.error else json.dumps(call.args, ensure_ascii=False)
                trace.append(ToolCallRecord(tool=call.name, args=args, result=result))
                results.append(result)
            self.provider.append_results(conversation, step, results)

            if step.end_turn:
                return LoopResult(text=step.text or NO_RESPONSE_TEXT, tool_calls=trace)

        logger.warning(
            "Tool loop hit %d iterations without a final answer (%d tool calls)",
            self.max_iterations,
            len(trace),
        )
        return LoopResult(text=MAX_ITERATIONS_TEXT, tool_calls=trace)


def run_agent_loop(
    api_key: str,
    model: str,
    system_prompt: str,
    history: Sequence[ChatMessage],
    tools: Sequence[ToolDefinition],
    *,
    max_iterations: int | None = None,
    client: httpx.Client | None = None,
) -> LoopResult:
    """Pick the adapter for *model* once and run the loop with it."""
    provider = load_provider(provider_for_model(model), client=client)
    return ToolLoop(provider, max_iterations=max_iterations).run(
        api_key, model, system_prompt, history, tools
    )
