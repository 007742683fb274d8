# diagnosis/prompt.py
"""
Prompt text and the fallback report.
"""
from __future__ import annotations

from typing import Optional

from .models import DiagnosisReport

# Prompt for the vision model. The reply must be a single JSON object.
DIAGNOSIS_PROMPT = """You are a professional pet health AI. Analyze this pet photo and provide a detailed health assessment. Output ONLY a JSON object with the following fields, no markdown and no other text:
{
  "healthScore": integer health score from 0-100,
  "riskLevel": "low" | "medium" | "high",
  "diagnosis": "diagnosis conclusion",
  "description": "detailed text describing the pet's appearance, breed characteristics, posture, expression and current state",
  "diseases": [
    {
      "name": "disease name",
      "probability": integer probability from 0-100,
      "severity": "low" | "medium" | "high"
    }
  ],
  "recommendations": [
    {
      "title": "recommendation title",
      "description": "detailed recommendation content",
      "priority": "low" | "medium" | "high"
    }
  ],
  "medications": [
    {
      "name": "medication name",
      "dosage": "dosage instructions",
      "frequency": "usage frequency",
      "duration": "treatment duration",
      "purpose": "treatment purpose"
    }
  ]
}

Analysis style:
1. First confirm the pet's breed and appearance characteristics
2. Describe the pet's posture, expression and physical condition
3. Give a professional health assessment based on these observations
4. Give practical care and medication recommendations
5. Phrase specific action guidance as imperative sentences

Keep descriptions objective and professional, and recommendations practical and actionable."""

SYMPTOMS_SUFFIX = "\n\nThe owner reports these symptoms: {symptoms}"


def build_prompt(symptoms: Optional[str] = None) -> str:
    """Prompt text, with the owner's symptoms appended when given."""
    if symptoms and symptoms.strip():
        return DIAGNOSIS_PROMPT + SYMPTOMS_SUFFIX.format(symptoms=symptoms.strip())
    return DIAGNOSIS_PROMPT


# Returned whenever the model reply cannot be turned into a report.
FALLBACK_REPORT = DiagnosisReport.model_validate({
    "healthScore": 85,
    "riskLevel": "low",
    "diagnosis": "Based on image analysis, the pet is in good overall health",
    "description": (
        "This is a healthy-looking pet with neat fur, bright eyes, and relaxed posture. "
        "From visual observation, the pet appears calm and relaxed with no obvious signs "
        "of pain or serious illness. Regular health checkups are recommended to maintain "
        "continued good condition."
    ),
    "diseases": [
        {"name": "No obvious diseases", "probability": 95, "severity": "low"},
    ],
    "recommendations": [
        {
            "title": "Maintain good habits",
            "description": (
                "Continue maintaining current health care habits, regularly groom fur, "
                "keep environment clean and safe"
            ),
            "priority": "medium",
        },
        {
            "title": "Monitor behavior changes",
            "description": (
                "Closely monitor pet's appetite, activity level and mental state, "
                "seek medical attention if abnormalities occur"
            ),
            "priority": "medium",
        },
    ],
    "medications": [
        {
            "name": "Multivitamin",
            "dosage": "Based on weight calculation",
            "frequency": "Once daily",
            "duration": "Continue for 1 month",
            "purpose": "Supplement nutrition, boost immunity",
        },
    ],
})
