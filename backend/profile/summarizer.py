"""Summarisation collaborator: drafts the judgment fields of a profile.

The model is asked for a strict JSON object.  Nothing it returns is trusted
verbatim: categorical fields are matched against the fixed vocabulary,
free text is sanitised and stripped of banned phrases, and opening hours
are never taken from the model at all.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from backend.config import settings
from backend.errors import SummarizerError
from backend.extract.licenses import format_licenses, merge_licenses, parse_license_blocks
from backend.profile.models import ABSENT, BusinessProfileRecord
from backend.profile.vocabulary import Vocabulary, load_vocabulary

DESCRIPTION_TEMPLATE = (
    '"[Company Name] provides [products/services offered], including [specific details '
    'about products/services]. The company assists clients with [details on the service '
    'process]."'
)

_PAYLOAD_KEYS = (
    "description",
    "clientBase",
    "ownerDemographic",
    "productsAndServices",
    "licenseNumbers",
    "methodsOfPayment",
    "serviceArea",
    "refundAndExchangePolicy",
)


# ---------------------------------------------------------------------------
# LLM helpers
# ---------------------------------------------------------------------------

def _get_llm() -> Any:
    """Return a configured LangChain chat model based on ``settings``."""
    if settings.llm_provider == "openai":
        from langchain_openai import ChatOpenAI

        return ChatOpenAI(model=settings.openai_chat_model, temperature=0)

    from langchain_ollama import ChatOllama

    return ChatOllama(model=settings.ollama_chat_model, temperature=0)


def _ask(llm: Any, system: str, user: str) -> str:
    """One chat turn; upstream failures become :class:`SummarizerError`."""
    from langchain_core.messages import HumanMessage, SystemMessage

    try:
        response = llm.invoke([SystemMessage(content=system), HumanMessage(content=user)])
    except Exception as exc:
        status = getattr(exc, "status_code", None)
        raise SummarizerError(f"Summarizer error: {exc}", status_code=status or 502) from exc
    return response.content if hasattr(response, "content") else str(response)


def build_system_prompt(vocab: Vocabulary) -> str:
    return (
        "You are a BBB representative enhancing a BBB Business Profile.\n\n"
        "INFORMATION SOURCE:\nUse ONLY the provided website content.\n\n"
        "EXCLUSIONS:\n"
        "- Do not reference other businesses in the industry.\n"
        "- Exclude owner names, locations, hours of operation, and time-related "
        "information unless the field specifically requests them.\n"
        "- Avoid the characters * [ ].\n"
        "- Do NOT include links to any websites.\n"
        "- No promotional language and nothing implying trust, endorsement or "
        "popularity. Banned words/phrases: " + ", ".join(vocab.banned_phrases) + ".\n\n"
        "GENERAL GUIDELINES:\n"
        f"- Business Description: factual only, <= {settings.description_max_chars} "
        f"characters, following this template: {DESCRIPTION_TEMPLATE}\n"
        '- If a field cannot be satisfied from the website content, return "None".\n\n'
        "CLIENT BASE: exactly one of: " + ", ".join(vocab.client_base) + ".\n\n"
        "PRODUCTS & SERVICES: comma-separated categories, 1-4 words each, each word "
        "capitalized. No service areas.\n\n"
        "OWNER DEMOGRAPHIC: exact match from: " + ", ".join(vocab.owner_demographic) + ".\n\n"
        "LICENSE NUMBER(S): for each license return exactly\n"
        "License Number: <value or None>\nIssuing Authority: <value or None>\n"
        "License Type: <value or None>\nStatus: <value or None>\n"
        "Expiration Date: <value or None>\nwith a blank line between licenses.\n\n"
        "METHODS OF PAYMENT: comma-separated, only from: "
        + ", ".join(vocab.payment_methods) + ".\n\n"
        "SERVICE AREA: geographic areas explicitly listed on the site.\n\n"
        "REFUND AND EXCHANGE POLICY: the policy text if present.\n\n"
        "OUTPUT: return strict JSON whose keys (all strings) are: "
        + ", ".join(_PAYLOAD_KEYS) + ". Return ONLY JSON."
    )


def build_user_prompt(record: BusinessProfileRecord, corpus: str) -> str:
    return (
        f"Website URL: {record.url}\n\n"
        f"Addresses found:\n{record.addresses}\n\n"
        f"Phone numbers found:\n{record.phone_numbers}\n\n"
        "WEBSITE CONTENT (verbatim):\n"
        f"{corpus[: settings.summary_corpus_chars]}\n"
    )


# ---------------------------------------------------------------------------
# Payload parsing
# ---------------------------------------------------------------------------

def _decode_json_object(raw: str) -> Optional[Dict[str, Any]]:
    text = re.sub(r"^```(?:json)?|```$", "", (raw or "").strip()).strip()
    match = re.search(r"\{.*\}", text, re.DOTALL)
    try:
        data = json.loads(match.group(0) if match else text)
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def parse_payload(llm: Any, raw: str) -> Dict[str, Any]:
    """Decode the model's JSON reply, asking it once to repair invalid JSON."""
    payload = _decode_json_object(raw)
    if payload is not None:
        return payload
    print("[SUMMARISE] Reply was not valid JSON; asking for a repair.")
    fixed = _ask(
        llm,
        "Return ONLY valid JSON with the exact keys requested. No commentary.",
        f"Convert to valid JSON:\n{raw}",
    )
    payload = _decode_json_object(fixed)
    if payload is None:
        raise SummarizerError("Summarizer returned invalid JSON", status_code=502)
    return payload


def _text(payload: Dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if isinstance(value, list):
        value = ", ".join(str(v) for v in value if v)
    text = str(value or "").strip()
    return ABSENT if text.lower() in ("", "none", "null", "n/a") else text


# ---------------------------------------------------------------------------
# Enforcement
# ---------------------------------------------------------------------------

def sanitize_description(text: str, max_chars: Optional[int] = None) -> str:
    """Remove ``* [ ]``, links and a leading label; cap the length."""
    limit = settings.description_max_chars if max_chars is None else max_chars
    out = re.sub(r"[*\[\]]", "", text or "")
    out = re.sub(r"https?:\S+", "", out)
    out = re.sub(r"^\s*Business\s*Description\s*:?\s*", "", out, flags=re.IGNORECASE)
    out = re.sub(r"\s+", " ", out).strip()
    return out[:limit].rstrip()


def strip_banned_phrases(text: str, phrases: Any) -> str:
    """Delete whole-word occurrences of every banned phrase, longest first."""
    out = text
    for phrase in sorted(phrases, key=len, reverse=True):
        out = re.sub(rf"\b{re.escape(phrase)}\b", "", out, flags=re.IGNORECASE)
    out = re.sub(r"\s+([.,;:!?])", r"\1", out)
    return re.sub(r"\s{2,}", " ", out).strip()


def finalize_description(text: str, client_base: str, vocab: Vocabulary) -> str:
    sentence = f" The business provides services to {client_base} customers."
    # One character is held back for the full stop added below.
    body = sanitize_description(text, settings.description_max_chars - len(sentence) - 1)
    if body and not re.search(r"[.!?]$", body):
        body += "."
    description = strip_banned_phrases(body + sentence, vocab.banned_phrases)
    return sanitize_description(description) or ABSENT


def normalize_products(value: str) -> str:
    if value == ABSENT:
        return ABSENT
    items: List[str] = []
    for item in value.split(","):
        words = item.split()
        if not words:
            continue
        titled = " ".join(w[:1].upper() + w[1:].lower() for w in words)
        if titled not in items:
            items.append(titled)
    return ", ".join(items) or ABSENT


def normalize_payment_methods(value: str, vocab: Vocabulary) -> str:
    methods: List[str] = []
    for item in re.split(r"[,\n]", value if value != ABSENT else ""):
        method = vocab.match_payment_method(item)
        if method and method not in methods:
            methods.append(method)
    return ", ".join(methods) or ABSENT


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Summary:
    description: str = ABSENT
    client_base: str = ABSENT
    owner_demographic: str = ABSENT
    products_and_services: str = ABSENT
    methods_of_payment: str = ABSENT
    service_area: str = ABSENT
    refund_and_exchange_policy: str = ABSENT
    license_numbers: str = ABSENT

    def apply(self, record: BusinessProfileRecord) -> BusinessProfileRecord:
        """Fold the summary into *record*.

        Model-reported licenses come first; pattern-matched ones already on
        the record are kept when their number is new.
        """
        licenses = merge_licenses(
            parse_license_blocks(self.license_numbers),
            parse_license_blocks(record.license_numbers),
        )
        return record.with_fields(
            description=self.description,
            client_base=self.client_base,
            owner_demographic=self.owner_demographic,
            products_and_services=self.products_and_services,
            methods_of_payment=self.methods_of_payment,
            service_area=self.service_area,
            refund_and_exchange_policy=self.refund_and_exchange_policy,
            license_numbers=format_licenses(licenses),
        )


def summarize(
    record: BusinessProfileRecord,
    corpus: str,
    vocab: Optional[Vocabulary] = None,
) -> Summary:
    """Ask the model for the judgment fields and validate what comes back.

    Raises:
        SummarizerError: Credentials are missing (500), the model call
            failed (its status, default 502) or the reply never became
            valid JSON (502).
    """
    vocab = vocab or load_vocabulary()
    if not settings.has_llm_credentials:
        raise SummarizerError("Missing OPENAI_API_KEY", status_code=500)

    print(f"[SUMMARISE] Asking {settings.active_model} for judgment fields …")
    llm = _get_llm()
    raw = _ask(llm, build_system_prompt(vocab), build_user_prompt(record, corpus))
    payload = parse_payload(llm, raw)

    client_base = vocab.match_client_base(_text(payload, "clientBase"))

    drafted = _text(payload, "description")
    draft = "" if drafted == ABSENT else sanitize_description(drafted)
    rewrite = ""
    if draft:
        rewrite = _ask(
            llm,
            f"Return ONLY the following text, <={settings.description_max_chars} chars, "
            "neutral tone, no promotional words, no links:\n"
            f"Template: {DESCRIPTION_TEMPLATE}",
            draft,
        )
    description = finalize_description(rewrite.strip() or draft, client_base, vocab)

    summary = Summary(
        description=description,
        client_base=client_base,
        owner_demographic=vocab.match_owner_demographic(_text(payload, "ownerDemographic"))
        or ABSENT,
        products_and_services=normalize_products(_text(payload, "productsAndServices")),
        methods_of_payment=normalize_payment_methods(_text(payload, "methodsOfPayment"), vocab),
        service_area=sanitize_description(_text(payload, "serviceArea"), 2000) or ABSENT,
        refund_and_exchange_policy=_text(payload, "refundAndExchangePolicy"),
        license_numbers=format_licenses(parse_license_blocks(_text(payload, "licenseNumbers"))),
    )
    print("[SUMMARISE] Done.")
    return summary
