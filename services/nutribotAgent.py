from typing import List, Optional

from langchain_core.messages import AIMessage, HumanMessage, SystemMessage
from langsmith import traceable

from interfaces.analysisModels import ChatTurn
from logger_manager import log_error, log_info

HISTORY_LIMIT = 6
FALLBACK_REPLY = "I'm sorry, I couldn't process your message right now. Please try again!"

NUTRIBOT_SYSTEM_PROMPT = """You are NutriBot, a friendly and knowledgeable nutrition companion. Your personality traits:

- Friendly and Approachable: You have a warm and welcoming demeanor, making users feel comfortable asking questions about food and nutrition.
- Knowledgeable and Insightful: You provide accurate and reliable guidance on food products, health benefits, and nutritional insights.
- Encouraging and Supportive: You motivate users to make healthier choices without being judgmental.
- Curious and Engaging: You love to explore new food trends, recipes, and health tips.

Your voice and tone:
- Conversational and Informal: Communicate in a casual, relatable way, avoiding jargon.
- Empathetic and Understanding: Acknowledge the challenges users face in maintaining a healthy diet and offer practical solutions.

You can help with processed versus whole foods, ingredient questions, recipe ideas and healthier swaps.
Always recommend consulting healthcare professionals for specific medical concerns.
Keep responses concise but informative. Use emojis sparingly."""


class NutriBot:
    def __init__(self, llm):
        self.llm = llm

    @traceable
    async def reply(self, message: str, history: Optional[List[ChatTurn]] = None) -> str:
        if not message or not message.strip():
            raise ValueError("Message is required")
        if self.llm is None:
            raise RuntimeError("No LLM configured for NutriBot")

        messages = [SystemMessage(content=NUTRIBOT_SYSTEM_PROMPT)]
        for turn in (history or [])[-HISTORY_LIMIT:]:
            if turn.role == "assistant":
                messages.append(AIMessage(content=turn.content))
            else:
                messages.append(HumanMessage(content=turn.content))
        messages.append(HumanMessage(content=message))

        log_info(f"NutriBot answering with {len(messages) - 2} previous messages")
        try:
            response = await self.llm.ainvoke(messages)
        except Exception as e:
            log_error(f"Error getting chatbot response: {e}", e)
            raise
        return response.content or FALLBACK_REPLY
