"""
Continuation policies - what to do with the remaining repositories after one fails
"""

import logging
import sys

logger = logging.getLogger(__name__)

YES_ANSWERS = ('y', 'yes')


class FailurePolicy:
    """Base policy: return True to continue with the next repository"""

    def should_continue(self, outcome, remaining: int) -> bool:
        raise NotImplementedError


class AbortPolicy(FailurePolicy):
    def should_continue(self, outcome, remaining: int) -> bool:
        return False


class ContinuePolicy(FailurePolicy):
    def should_continue(self, outcome, remaining: int) -> bool:
        return True


class PromptPolicy(FailurePolicy):
    """Asks the operator; anything but an explicit yes aborts"""

    def __init__(self, input_func=input, output=None):
        self.input_func = input_func
        self.output = output

    def should_continue(self, outcome, remaining: int) -> bool:
        out = self.output or sys.stdout
        print(f"\n❌ {outcome.repository}: {outcome.status.value}", file=out)
        if outcome.error is not None:
            print(outcome.error.describe(), file=out)
        try:
            answer = self.input_func(
                f"Continue with the remaining {remaining} repositories? [y/N] "
            )
        except EOFError:
            answer = ""
        decision = answer.strip().lower() in YES_ANSWERS
        logger.info(f"OPERATOR_DECISION repo={outcome.repository} continue={int(decision)}")
        return decision
