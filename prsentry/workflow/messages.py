"""Comment bodies posted to pull requests."""

CONFIRM_DIRECTIVE = "#Confirm"
DENY_DIRECTIVE = "#NotAConflict"

NO_REASON_PLACEHOLDER = "_No reason provided_"

VALIDATION_PROMPT = f"""\
✅ **AI Conflict Detection Results** ✅
Our AI has analyzed this pull request and found potential **semantic conflicts**.

### _What should you do next?_
📌 Please review the AI's findings and provide feedback by commenting with:
- `{CONFIRM_DIRECTIVE}` → If you agree this is a conflict.
- `{DENY_DIRECTIVE}` → If you believe there's no conflict _(please add a brief explanation)_.

✍️ _Tip: Reply with one of the above tags as a separate comment._
"""


def confirmation_message(label: str) -> str:
    """Reply to a reviewer confirming the conflict."""
    return (
        "🚨 **AI Conflict Validation Feedback** 🚨\n\n"
        "The reviewer has confirmed that **this is a conflict**. "
        f"The `{label}` label has been applied."
    )


def denial_message(explanation: str | None) -> str:
    """Reply to a reviewer rejecting the conflict."""
    return (
        "📝 **AI Conflict Validation Feedback** 📝\n\n"
        "The reviewer has determined that **this is not a conflict**.\n"
        f"🛠 **Reason:** {explanation or NO_REASON_PLACEHOLDER}"
    )
