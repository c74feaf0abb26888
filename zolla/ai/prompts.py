from typing import Sequence

from zolla.ai.types import ChatMessage

ANALYSIS_SYSTEM_PROMPT = "You are an expert resume analyzer. Always respond with valid JSON only."
TAILORED_RESUME_SYSTEM_PROMPT = "You are an expert resume writer. Always respond with valid JSON only."
COVER_LETTER_SYSTEM_PROMPT = "You are an expert cover letter writer. Always respond with valid JSON only."

# Ordered like the analysis catalog; each entry is (title, checklist, json shape).
OPTIONAL_ANALYSES: dict[str, tuple[str, tuple[str, ...], str]] = {
    "ats_compatibility": (
        "ATS COMPATIBILITY CHECK: Analyze if the resume will pass Applicant Tracking Systems. Check for:",
        (
            "Standard section headings",
            "Proper formatting",
            "Keyword density",
            "File format compatibility",
            "Parsing issues",
        ),
        '"ats_compatibility": {\n'
        '    "score": 7,\n'
        '    "summary": "Brief summary of ATS compatibility",\n'
        '    "issues": ["Issue 1", "Issue 2"],\n'
        '    "suggestions": ["Suggestion 1", "Suggestion 2"]\n'
        "  }",
    ),
    "impact_statement_review": (
        "IMPACT STATEMENT REVIEW: Evaluate the strength of accomplishments and achievements:",
        (
            "Identify weak or vague statements",
            "Look for quantified results",
            "Assess action verbs usage",
            "Check for specific examples",
        ),
        '"impact_statement_review": {\n'
        '    "score": 6,\n'
        '    "summary": "Brief summary of impact statements",\n'
        '    "weak_statements": ["Weak statement 1", "Weak statement 2"],\n'
        '    "suggestions": ["Suggestion 1", "Suggestion 2"]\n'
        "  }",
    ),
    "skills_gap_assessment": (
        "SKILLS GAP ASSESSMENT: Compare candidate skills to job requirements:",
        (
            "Identify missing technical skills",
            "Assess soft skills alignment",
            "Check certification requirements",
            "Evaluate experience level match",
        ),
        '"skills_gap_assessment": {\n'
        '    "score": 5,\n'
        '    "summary": "Brief summary of skills gaps",\n'
        '    "missing_skills": ["Skill 1", "Skill 2"],\n'
        '    "suggestions": ["Suggestion 1", "Suggestion 2"]\n'
        "  }",
    ),
    "format_optimization": (
        "FORMAT OPTIMIZATION: Review resume formatting and structure:",
        (
            "Section organization",
            "Visual hierarchy",
            "Length appropriateness",
            "Professional appearance",
        ),
        '"format_optimization": {\n'
        '    "score": 8,\n'
        '    "summary": "Brief summary of format issues",\n'
        '    "issues": ["Issue 1", "Issue 2"],\n'
        '    "suggestions": ["Suggestion 1", "Suggestion 2"]\n'
        "  }",
    ),
    "career_story_flow": (
        "CAREER STORY FLOW: Analyze career progression narrative:",
        (
            "Logical career progression",
            "Consistency in roles",
            "Gap explanations",
            "Overall coherence",
        ),
        '"career_story_flow": {\n'
        '    "score": 7,\n'
        '    "summary": "Brief summary of career story flow",\n'
        '    "issues": ["Issue 1", "Issue 2"],\n'
        '    "suggestions": ["Suggestion 1", "Suggestion 2"]\n'
        "  }",
    ),
}

_BASE_TASKS = (
    "Extract the most relevant **keywords** from the job description.",
    "Check if these keywords are present in the resume.",
    "Identify key **skills or qualifications** that are missing or weakly represented in the resume.",
    "Provide a brief **summary** on how well the resume matches the job.",
    "Give a **match score out of 100** based on relevance and completeness.",
)

_BASE_SHAPE = (
    '  "match_summary": "Short paragraph summarizing the overall compatibility",\n'
    '  "match_score": "XX/100",\n'
    '  "job_keywords_detected": [\n'
    '    {"keyword": "JavaScript", "status": "Present"},\n'
    '    {"keyword": "React", "status": "Missing"}\n'
    "  ],\n"
    '  "gaps_and_suggestions": [\n'
    '    "The resume lacks mention of specific skill/requirement",\n'
    '    "Add more emphasis on relevant experience/project"\n'
    "  ]"
)


def _ordered_optional(analysis_types: Sequence[str]) -> list[str]:
    selected = set(analysis_types)
    return [type_id for type_id in OPTIONAL_ANALYSES if type_id in selected]


def build_analysis_prompt(resume_text: str, job_description: str, analysis_types: Sequence[str]) -> str:
    optional = _ordered_optional(analysis_types)

    lines = [
        "You are an expert resume reviewer and job match analyst.",
        "",
        "Given the following **resume** and **job description**, perform the following tasks:",
        "",
    ]
    for index, task in enumerate(_BASE_TASKS, start=1):
        lines.append(f"{index}. {task}")

    if optional:
        lines.extend(["", "Additionally, perform these specific analyses:"])
        for index, type_id in enumerate(optional, start=len(_BASE_TASKS) + 1):
            title, checklist, _shape = OPTIONAL_ANALYSES[type_id]
            lines.append(f"{index}. {title}")
            lines.extend(f"   - {item}" for item in checklist)

    shape_parts = [_BASE_SHAPE]
    shape_parts.extend(f"  {OPTIONAL_ANALYSES[type_id][2]}" for type_id in optional)
    shape = "{\n" + ",\n".join(shape_parts) + "\n}"
    shape_hint = " (include additional analysis sections as requested)" if optional else ""

    lines.extend(
        [
            "",
            "RESUME:",
            resume_text,
            "",
            "JOB DESCRIPTION:",
            job_description,
            "",
            f"Please provide a JSON response with the following structure{shape_hint}:",
            shape,
            "",
            "Be concise but insightful. Write in plain, helpful English.",
        ]
    )
    return "\n".join(lines)


def build_analysis_messages(
    resume_text: str, job_description: str, analysis_types: Sequence[str]
) -> list[ChatMessage]:
    return [
        ChatMessage(role="system", content=ANALYSIS_SYSTEM_PROMPT),
        ChatMessage(role="user", content=build_analysis_prompt(resume_text, job_description, analysis_types)),
    ]


def build_tailored_resume_messages(resume_text: str, job_description: str) -> list[ChatMessage]:
    user = (
        "Please create a tailored resume based on the original resume and job description:\n\n"
        f"ORIGINAL RESUME:\n{resume_text}\n\n"
        f"JOB DESCRIPTION:\n{job_description}\n\n"
        "Please provide a JSON response with the following structure:\n"
        "{\n"
        '  "tailored_resume": "Complete tailored resume text here",\n'
        '  "improvements": ["improvement1", "improvement2"]\n'
        "}\n\n"
        "The tailored resume should:\n"
        "- Emphasize relevant skills and experience\n"
        "- Use keywords from the job description\n"
        "- Restructure content to match job requirements\n"
        "- Maintain professional formatting"
    )
    return [
        ChatMessage(role="system", content=TAILORED_RESUME_SYSTEM_PROMPT),
        ChatMessage(role="user", content=user),
    ]


def build_cover_letter_messages(resume_text: str, job_description: str) -> list[ChatMessage]:
    user = (
        "Please create a professional cover letter based on the resume and job description:\n\n"
        f"RESUME:\n{resume_text}\n\n"
        f"JOB DESCRIPTION:\n{job_description}\n\n"
        "Please provide a JSON response with the following structure:\n"
        "{\n"
        '  "cover_letter": "Complete professional cover letter text here",\n'
        '  "key_points": ["key point 1", "key point 2"]\n'
        "}\n\n"
        "The cover letter should:\n"
        "- Be professional and engaging\n"
        "- Highlight relevant experience from the resume\n"
        "- Address specific requirements from the job description\n"
        "- Show enthusiasm for the role and company\n"
        "- Be concise but compelling (3-4 paragraphs)\n"
        "- Include proper salutation and closing\n"
        "- Use keywords from the job description naturally"
    )
    return [
        ChatMessage(role="system", content=COVER_LETTER_SYSTEM_PROMPT),
        ChatMessage(role="user", content=user),
    ]
