"""
Template prompt builders.

Each builder turns the user's free-text prompt plus the template's form
fields into the enhanced prompt sent to the generation API. Templates that
have no builder send the prompt unchanged.
"""
from typing import Any, Callable, Dict, List, Optional

from fastapi import HTTPException

PromptBuilder = Callable[[str, Dict[str, Any]], str]

LETTER_TYPES = {
    "cover": "Cover Letter",
    "business": "Business Letter",
    "resignation": "Resignation Letter",
    "recommendation": "Recommendation Letter",
    "complaint": "Complaint Letter",
    "thank-you": "Thank You Letter",
}

BUSINESS_PLAN_SECTIONS = {
    "full": "complete business plan",
    "executive-summary": "executive summary",
    "market-analysis": "market analysis",
    "marketing": "marketing strategy",
    "operations": "operations plan",
    "financial": "financial plan",
}

BUSINESS_STAGES = {
    "idea": "Idea stage",
    "startup": "Startup",
    "growth": "Growth stage",
    "established": "Established business",
}

LEGAL_DOCUMENT_TYPES = {
    "court-report": "Court Report",
    "affidavit": "Affidavit",
    "witness-statement": "Witness Statement",
    "legal-brief": "Legal Brief",
    "motion": "Motion",
    "legal-memo": "Legal Memorandum",
}

SOCIAL_PLATFORMS = {
    "twitter": ("Twitter/X", "280 characters"),
    "instagram": ("Instagram", "2,200 characters"),
    "facebook": ("Facebook", "500 words"),
    "linkedin": ("LinkedIn", "3,000 characters"),
    "tiktok": ("TikTok", "150 characters"),
}


def _option(options: Dict[str, Any], key: str, default: str = "") -> str:
    value = options.get(key)
    if value is None:
        return default
    return str(value).strip() or default


def _require(options: Dict[str, Any], *keys: str) -> None:
    for key in keys:
        if not _option(options, key):
            raise HTTPException(status_code=400, detail=f"Missing required field: {key}")


def build_letter_prompt(prompt: str, options: Dict[str, Any]) -> str:
    letter_type = LETTER_TYPES.get(_option(options, "letter_type", "cover"), "Letter")
    recipient = _option(options, "recipient")
    to_part = f" to {recipient}" if recipient else ""
    return (
        f"Write a professional {letter_type}{to_part}:\n\n{prompt}\n\n"
        "Make it well-structured with proper formatting, appropriate tone, clear opening and closing, "
        "and maintain professional standards."
    )


def build_cover_letter_prompt(prompt: str, options: Dict[str, Any]) -> str:
    _require(options, "job_title")
    company = _option(options, "company_name")
    at_company = f" at {company}" if company else ""
    return (
        f"Write a compelling cover letter for a {_option(options, 'job_title')} position{at_company}.\n\n"
        f"Experience Level: {_option(options, 'experience_level', 'Mid-level')}\n"
        f"Tone: {_option(options, 'tone', 'Professional')}\n\n"
        f"Candidate Background:\n{prompt}\n\n"
        "Highlight relevant achievements, show enthusiasm for the role and close with a clear call to action."
    )


def build_friendly_letter_prompt(prompt: str, options: Dict[str, Any]) -> str:
    recipient = _option(options, "recipient_name")
    addressed = f" addressed to {recipient}" if recipient else ""
    return (
        f"Write a {_option(options, 'letter_type', 'friendly letter')} with a "
        f"{_option(options, 'tone', 'warm')} tone{addressed}.\n\n"
        f"The letter should be about: {prompt}\n\n"
        "Guidelines:\n"
        "- Keep the language friendly and personal\n"
        "- Use a conversational yet caring tone\n"
        "- Include a warm opening and closing"
    )


def build_business_plan_prompt(prompt: str, options: Dict[str, Any]) -> str:
    section = BUSINESS_PLAN_SECTIONS.get(_option(options, "section", "full"), "complete business plan")
    stage = BUSINESS_STAGES.get(_option(options, "stage", "startup"), "Startup")
    lines = [f"Create a {section} for a business plan.", ""]
    if _option(options, "business_name"):
        lines.append(f"Business Name: {_option(options, 'business_name')}")
    if _option(options, "industry"):
        lines.append(f"Industry: {_option(options, 'industry')}")
    lines.append(f"Business Stage: {stage}")
    lines += ["", "Business Concept:", prompt, "",
              "Use clear headings, realistic assumptions and actionable recommendations."]
    return "\n".join(lines)


def build_legal_prompt(prompt: str, options: Dict[str, Any]) -> str:
    doc_type = LEGAL_DOCUMENT_TYPES.get(_option(options, "document_type", "court-report"), "Court Report")
    case_number = _option(options, "case_number")
    jurisdiction = _option(options, "jurisdiction")
    text = f"Write a professional {doc_type} for court proceedings based on the following details: {prompt}"
    if case_number:
        text += f". Case Reference: {case_number}"
    if jurisdiction:
        text += f". Jurisdiction: {jurisdiction}"
    return text + (
        ". Use formal legal language, proper formatting with numbered paragraphs, relevant legal citations "
        "where appropriate, and maintain a professional, objective tone. Include proper headings and "
        "structure typical of legal documents."
    )


def build_social_prompt(prompt: str, options: Dict[str, Any]) -> str:
    platform, limit = SOCIAL_PLATFORMS.get(_option(options, "platform", "instagram"), SOCIAL_PLATFORMS["instagram"])
    hashtags = _option(options, "hashtags")
    hashtag_line = f"Include these hashtags: {hashtags}" if hashtags else "Include relevant hashtags."
    return (
        f"Create a {_option(options, 'post_type', 'engaging')} social media post for {platform} about: {prompt}.\n"
        f"Make it engaging, include relevant emojis, and optimize for {platform}'s audience.\n"
        f"{hashtag_line}\n"
        f"Keep within {limit}."
    )


def build_hashtag_prompt(prompt: str, options: Dict[str, Any]) -> str:
    return (
        f"Generate relevant and trending hashtags for: {prompt}. "
        f"Platform: {_option(options, 'platform', 'instagram')}. Topic: {_option(options, 'topic', 'general')}. "
        "Provide a mix of popular, niche, and branded hashtags. Format them as a clean list."
    )


def build_image_prompt(prompt: str, options: Dict[str, Any]) -> str:
    return (
        f"Create a detailed and optimized image generation prompt for: {prompt}. "
        f"Style: {_option(options, 'style', 'realistic')}. Additional details: {_option(options, 'details', 'none')}. "
        "Include specific details about composition, lighting, colors, mood, and technical aspects. "
        "Make it suitable for AI image generators like Midjourney, DALL-E, or Stable Diffusion."
    )


def build_video_prompt(prompt: str, options: Dict[str, Any]) -> str:
    return (
        f"Create a detailed video generation prompt for: {prompt}. "
        f"Duration: {_option(options, 'duration', '30 seconds')}. Style: {_option(options, 'style', 'cinematic')}. "
        "Include camera movements, scene descriptions, transitions, lighting, mood, and technical specifications. "
        "Make it suitable for AI video generators like Runway, Pika, or traditional video production."
    )


PROMPT_BUILDERS: Dict[str, PromptBuilder] = {
    "letter": build_letter_prompt,
    "cover_letter": build_cover_letter_prompt,
    "cover-letter": build_cover_letter_prompt,
    "friendly_letter": build_friendly_letter_prompt,
    "friendly-letter": build_friendly_letter_prompt,
    "business_plan": build_business_plan_prompt,
    "business-plan": build_business_plan_prompt,
    "court_report": build_legal_prompt,
    "court-report": build_legal_prompt,
    "legal": build_legal_prompt,
    "social": build_social_prompt,
    "hashtag": build_hashtag_prompt,
    "image-prompt": build_image_prompt,
    "video-prompt": build_video_prompt,
}


def build_user_prompt(template_type: str, prompt: str, options: Optional[Dict[str, Any]] = None) -> str:
    builder = PROMPT_BUILDERS.get(template_type)
    if builder is None:
        return prompt
    return builder(prompt, options or {})


def supported_templates() -> List[str]:
    return sorted(PROMPT_BUILDERS)
