from aiogram import Dispatcher
from aiogram.types import Message
from aiogram.filters import Command
from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton, WebAppInfo
from config.config import Config
from config.messages import COMMAND_MESSAGES, DIALOGUE_MESSAGES
from nlu.dialogue import DialogueManager
from utils.logger import setup_logger
from utils.metrics import track_operation

logger = setup_logger(
    name="command_logger",
    level="INFO"
)


def register_command_handlers(dp: Dispatcher):

    dp.message.register(start_command, Command("start"))
    dp.message.register(help_command, Command("help"))
    dp.message.register(cancel_command, Command("cancel"))
    dp.message.register(privacy_command, Command("privacy"))


def _webapp_keyboard(config: Config) -> InlineKeyboardMarkup | None:
    if not config.WEBAPP_URL:
        return None
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(
            text=COMMAND_MESSAGES['webapp_button'],
            web_app=WebAppInfo(url=config.WEBAPP_URL)
        )]
    ])


@track_operation("start_command")
async def start_command(message: Message, dialogue: DialogueManager, config: Config, **kwargs):
    """Команда /start - приветствие и сброс незавершённого диалога"""
    await dialogue.reset(message.chat.id)
    await message.answer(COMMAND_MESSAGES['start'], reply_markup=_webapp_keyboard(config))

@track_operation("help_command")
async def help_command(message: Message, **kwargs):
    """Команда /help - примеры запросов"""
    await message.answer(COMMAND_MESSAGES['help'])

@track_operation("cancel_command")
async def cancel_command(message: Message, dialogue: DialogueManager, **kwargs):
    """Команда /cancel - прервать текущий диалог"""
    await dialogue.reset(message.chat.id)
    logger.info(f"User {message.from_user.id} cancelled dialogue")
    await message.answer(DIALOGUE_MESSAGES['cancelled'])

@track_operation("privacy_command")
async def privacy_command(message: Message, **kwargs):
    """Команда /privacy - что бот хранит"""
    await message.answer(COMMAND_MESSAGES['privacy'])
