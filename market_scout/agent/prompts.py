"""Prompt templates for the extraction model."""

import json

from market_scout.core.types import Session

EXTRACTION_SYSTEM_PROMPT = """You are an intent-driven, taste-aware automotive agent.

CRITICAL:
- Return ONLY a single JSON object (no markdown, no commentary).
- Do NOT echo the user message.
- Do NOT write a chat response. The server renders the user-facing message.
- Never invent facts. Only extract or propose structured rules."""

EXTRACTION_PROMPT = """Current state: {state}

Session snapshot (for continuity):
{snapshot}

User message:
\"\"\"
{message}
\"\"\"

TASK BY STATE:

S1_CAPTURE:
- Extract what you can from the user message into a "patch" object:
  - patch.intent.vehicle (make/model/gen/trim/color/transmission/year_range)
  - patch.intent.budget.max (number) if provided
  - patch.constraints.tier1 (non-negotiables / deal-breakers)
  - patch.constraints.tier2 (strong preferences)
  - patch.constraints.tier3 (nice-to-haves)
  - patch.taste.rejection_rules (explicit hard no's if stated)
- If critical info is missing AFTER extraction, return up to 4 clarifying questions in "questions".
- Output shape:
  {{ "patch": {{...}}, "questions": [...] }}

S2_CONFIRM:
- Produce a "boundary" object that reflects the extracted constraints/taste:
  - tier1, tier2, hard_rejections, acceptable_compromises
- You may also include a small "patch" if you are correcting earlier extraction.
- Output shape:
  {{ "boundary": {{...}}, "patch": {{...optional...}} }}

S3_EXPLORE / S4_DECIDE:
- The server retrieves and scores listings. Return {{}}.

S5_WATCH:
- Produce a "watch" object suitable for saving/exporting:
  - must_have, acceptable, reject, sources, cadence
  - optional geography and search_strings
- Output shape:
  {{ "watch": {{...}}, "patch": {{...optional...}} }}

Return ONLY JSON."""


def build_extraction_messages(session: Session, message: str) -> list[dict[str, str]]:
    """Chat messages for one extraction call."""
    snapshot = {
        "intent": session.intent.model_dump(mode="json", exclude_none=True),
        "constraints": session.constraints.model_dump(mode="json"),
        "taste": session.taste.model_dump(mode="json"),
        "watch": session.watch.model_dump(mode="json", exclude_none=True) if session.watch else None,
    }
    prompt = EXTRACTION_PROMPT.format(
        state=session.state.value,
        snapshot=json.dumps(snapshot, ensure_ascii=False, indent=2),
        message=message,
    )
    return [
        {"role": "system", "content": EXTRACTION_SYSTEM_PROMPT},
        {"role": "user", "content": prompt},
    ]
