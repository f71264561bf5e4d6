from aiogram import Dispatcher, F
from aiogram.types import Message
from nlu.dialogue import DialogueManager
from utils.validators import InputValidator
from utils.logger import setup_logger
from utils.error_handler import ErrorHandler
from utils.metrics import metrics, track_operation
from .formatting import render_reply

validator = InputValidator()
logger = setup_logger(name="message_logger", level="INFO")

def register_message_handlers(dp: Dispatcher):

    dp.message.register(message_handler, F.text)


async def answer_with_dialogue(message: Message, dialogue: DialogueManager, text: str):
    """
    Прогоняет текст через автомат диалога и отвечает пользователю.

    Общая точка входа для текстовых и голосовых сообщений.
    """
    reply = await dialogue.handle(message.chat.id, text)
    metrics.record_reply(reply.key)
    await message.answer(render_reply(reply))


@track_operation("text_message")
async def message_handler(message: Message, dialogue: DialogueManager, **kwargs):

    is_valid, error = validator.validate_message(message.text)
    if not is_valid:
        await ErrorHandler.handle_validation_error(message, error)
        return

    try:
        await answer_with_dialogue(message, dialogue, message.text)
    except Exception as e:
        await ErrorHandler.handle_unexpected_error(message, e, "text_message")
