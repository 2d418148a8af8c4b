# ============================================================================
# src/rx_matching/core/agent_base.py
# ============================================================================
"""
Abstract Base Agent Class

Every matching step (catalog lookup, suggestion ranking) is an agent
operating on one LineContext.

Every agent must implement:
- execute(context): Main processing logic
- get_name(): Agent identifier

Every agent gets:
- Logging
- Error handling (a failing line never aborts the analysis)
- Execution metrics
"""

from abc import ABC, abstractmethod
from typing import Dict, Any
import logging
from datetime import datetime

from .context.line_context import LineContext
from .config import get_config
from ..utils.exceptions import CatalogError


class Agent(ABC):
    """
    Abstract base class for all matching agents.

    Agents are shared by all concurrent line tasks of an orchestrator, so
    they keep no per-line state: everything a line needs lives in its
    LineContext.
    """

    def __init__(self, config: Dict[str, Any] = None):
        """
        Initialize agent with configuration.

        Args:
            config: Configuration dictionary (passed config overrides env defaults)
        """
        env_config = get_config()
        self.config = {**env_config, **(config or {})}
        self.logger = logging.getLogger(f"{__name__}.{self.get_name()}")
        self._execution_count = 0
        self._failure_count = 0
        self._total_duration = 0.0

    @abstractmethod
    async def execute(self, context: LineContext) -> Dict[str, Any]:
        """
        Main agent execution logic.

        Args:
            context: Line context (read and modify)

        Returns:
            Dict containing:
                - decision: What the agent concluded
                - confidence: Confidence score (0.0-1.0)
                - reasoning: Human-readable explanation
        """
        pass

    @abstractmethod
    def get_name(self) -> str:
        """Return agent name for logging."""
        pass

    async def run(self, context: LineContext) -> Dict[str, Any]:
        """
        Wrapper around execute() that handles logging, timing, and errors.

        Catalog failures mark the line as catalog-unavailable; any other
        failure is recorded as a line error. Neither propagates.
        """
        agent_name = self.get_name()
        start_time = datetime.now()

        self.logger.debug(f"Executing {agent_name} on line {context.line.line_index}")

        try:
            result = await self.execute(context)

            duration = (datetime.now() - start_time).total_seconds()
            self._execution_count += 1
            self._total_duration += duration

            context.log_agent_execution(
                agent_name=agent_name,
                decision={**result, "duration_seconds": duration}
            )

            self.logger.debug(
                f"{agent_name} completed in {duration:.3f}s "
                f"(decision: {result.get('decision')}, confidence: {result.get('confidence', 0.0):.2f})"
            )
            return result

        except CatalogError as e:
            duration = (datetime.now() - start_time).total_seconds()
            self._failure_count += 1
            self.logger.warning(f"{agent_name}: catalog unavailable for line {context.line.line_index}: {e}")
            context.mark_catalog_unavailable(str(e))
            context.log_agent_execution(
                agent_name=agent_name,
                decision={"error": str(e), "duration_seconds": duration}
            )
            return self._error_result(e)

        except Exception as e:
            duration = (datetime.now() - start_time).total_seconds()
            self._failure_count += 1
            self.logger.error(f"{agent_name} failed: {str(e)}", exc_info=True)
            context.add_error(f"{agent_name} failed: {str(e)}")
            context.log_agent_execution(
                agent_name=agent_name,
                decision={"error": str(e), "duration_seconds": duration}
            )
            return self._error_result(e)

    @staticmethod
    def _error_result(error: Exception) -> Dict[str, Any]:
        return {
            "decision": "error",
            "confidence": 0.0,
            "reasoning": f"Agent execution failed: {str(error)}",
            "error": str(error)
        }

    def get_metrics(self) -> Dict[str, Any]:
        """
        Get agent performance metrics.

        Returns:
            Dict with execution count, failures, total time, average time
        """
        avg_duration = (
            self._total_duration / self._execution_count
            if self._execution_count > 0
            else 0.0
        )

        return {
            "agent_name": self.get_name(),
            "execution_count": self._execution_count,
            "failure_count": self._failure_count,
            "total_duration_seconds": self._total_duration,
            "average_duration_seconds": avg_duration,
        }
