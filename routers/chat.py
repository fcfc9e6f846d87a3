from fastapi import APIRouter, Depends, HTTPException

from interfaces.analysisModels import ChatRequest, ChatResponse
from logger_manager import log_info, log_error
from routers.dependencies import get_nutribot
from services.nutribotAgent import NutriBot

router = APIRouter()


@router.post("", response_model=ChatResponse)
async def chat(request: ChatRequest, nutribot: NutriBot = Depends(get_nutribot)):
    log_info("Chat endpoint called")
    try:
        response = await nutribot.reply(request.message, request.messages)
        return ChatResponse(response=response)
    except ValueError:
        raise HTTPException(status_code=400, detail="Message is required")
    except Exception as e:
        log_error(f"Chat error: {e}", e)
        raise HTTPException(status_code=500, detail="Failed to generate chat response")
