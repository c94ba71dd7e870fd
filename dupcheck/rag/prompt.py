"""Prompt template for duplicate adjudication."""
from langchain_core.prompts import ChatPromptTemplate

DUPLICATE_PROMPT_TEMPLATE = """You are an expert software defect analyst. Your task is to determine
if a new defect is a duplicate of existing defects.

RULES FOR DUPLICATE DETECTION:
1. Two defects are duplicates ONLY if they have the SAME ROOT CAUSE
2. Similar symptoms alone DO NOT make defects duplicates
3. Confidence > 0.8 required to mark as duplicate
4. Focus on: root cause, reproduction steps, error messages
5. Different components with same root cause ARE duplicates

CONTEXT - Similar defects from database:
{context}

NEW DEFECT:
{query}

Analyze if the new defect is a duplicate of any defect in the context.
Return your analysis as a valid JSON object with this exact structure:
{{
  "IsDuplicate": boolean,
  "Reason": "detailed explanation",
  "Defects": [
      // array of duplicate defect objects found in context.
      // Include fields: Id, Summary, Description, Severity, Status, Component, Priority
  ],
  "Confidence": float between 0.0 and 1.0
}}"""

duplicate_prompt = ChatPromptTemplate.from_messages([
    ("human", DUPLICATE_PROMPT_TEMPLATE),
])


def build_messages(context: str, query: str):
    """Render the adjudication prompt into chat messages."""
    return duplicate_prompt.format_messages(context=context, query=query)
