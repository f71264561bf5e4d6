from aiogram import Dispatcher
from . import commands, messages, voice

def register_handlers(dp: Dispatcher):

    commands.register_command_handlers(dp)
    voice.register_voice_handlers(dp)
    messages.register_message_handlers(dp)
