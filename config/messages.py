"""
Тексты сообщений бота.

Ключи DIALOGUE_MESSAGES совпадают с ключами ответов DialogueManager.
Шаблоны подставляются через str.format.
"""

EMOJI = {
    "success": "✅",
    "error": "❌",
    "warning": "⚠️",
    "info": "ℹ️",
    "subscription": "🔁",
    "expense": "💸",
    "income": "💰",
    "calendar": "📅",
    "trash": "🗑",
    "wave": "👋",
    "lock": "🔒",
    "mic": "🎤",
}

KIND_TITLES = {
    "subscription": "Подписки",
    "expense": "Расходы",
    "income": "Доходы",
}

KIND_NAMES_GENITIVE = {
    "subscription": "подписок",
    "expense": "расходов",
    "income": "доходов",
}

COMMAND_MESSAGES = {
    "start": (
        f"{EMOJI['wave']} Привет! Я помогу следить за подписками, расходами и доходами.\n\n"
        "Просто напишите или надиктуйте, например:\n"
        "• Добавь Netflix 10000 вон 12 числа\n"
        "• Расход 12000 вон кафе сегодня\n"
        "• Доход 3000000 вон зарплата\n"
        "• Мои подписки\n"
        "• Удали подписку Netflix\n\n"
        "Команды: /help, /cancel, /privacy"
    ),
    "help": (
        f"{EMOJI['info']} Что я понимаю:\n\n"
        f"{EMOJI['subscription']} Подписки: «Добавь Spotify 11000 вон 5 числа», "
        "«Подписка YouTube 14900 вон в год», «Мои подписки», «Удали подписку Spotify»\n"
        f"{EMOJI['expense']} Расходы: «Расход 12000 вон кафе сегодня», «Потратил 5000 вон такси вчера», "
        "«Мои расходы»\n"
        f"{EMOJI['income']} Доходы: «Доход 500$ фриланс», «Мои доходы»\n\n"
        "Категорию можно указать словом «категория»: «Расход 8000 вон обед категория еда».\n"
        "Языки: русский, English, 한국어.\n\n"
        "/cancel - прервать текущий диалог"
    ),
    "privacy": (
        f"{EMOJI['lock']} Конфиденциальность\n\n"
        "• Храню только записи, которые вы создали: название, сумму, валюту, дату и категорию.\n"
        "• Текст сообщений не сохраняется и не попадает в журналы.\n"
        "• Голосовые сообщения отправляются на распознавание и не хранятся.\n"
        "• Удалить запись можно в любой момент командой вида «Удали подписку Netflix»."
    ),
    "webapp_button": "Открыть дашборд",
    "voice_unavailable": f"{EMOJI['mic']} Распознавание голоса не настроено, напишите текстом.",
}

DIALOGUE_MESSAGES = {
    "cancelled": f"{EMOJI['success']} Отменено.",
    "greet": f"{EMOJI['wave']} Привет! Напишите, что добавить или показать. /help - примеры.",
    "unknown": (
        f"{EMOJI['info']} Не понял запрос. Попробуйте, например, "
        "«Добавь Netflix 10000 вон 12 числа» или «Мои расходы». /help - все примеры."
    ),

    "list": "{emoji} {title}:\n\n{items}",
    "list_empty": "{emoji} У вас пока нет {kind_genitive}.",

    "added_subscription": (
        f"{EMOJI['success']} Подписка добавлена: {{name}} - {{cost}} {{currency_symbol}}\n"
        f"{EMOJI['calendar']} {{recurrence_label}}, следующий платёж {{date}}"
    ),
    "added_expense": (
        f"{EMOJI['success']} Расход записан: {{title}} - {{amount}} {{currency_symbol}} ({{date}})"
    ),
    "added_income": (
        f"{EMOJI['success']} Доход записан: {{title}} - {{amount}} {{currency_symbol}} ({{date}})"
    ),

    "ask_name": "Как называется подписка?",
    "name_too_short": f"{EMOJI['warning']} Название слишком короткое (минимум 2 символа). Как называется подписка?",
    "ask_cost": "Сколько она стоит? Например: 10000 вон",
    "cost_not_recognized": f"{EMOJI['warning']} Не понял сумму. Напишите число, например: 10000 вон",
    "ask_date": "Какого числа списание? Например: 12 числа или 15.03. Напишите «пропустить», чтобы поставить 1 число.",

    "missing_title": f"{EMOJI['warning']} Не понял название. Напишите ещё раз с названием, например: «{{example}}»",
    "missing_amount": f"{EMOJI['warning']} Не нашёл сумму для «{{title}}». Напишите ещё раз с суммой, например: «{{example}}»",

    "ask_type_choice": (
        "Что это - «{title}», {amount} {currency_symbol}?\n"
        "1. Расход\n"
        "2. Доход\n"
        "3. Подписка"
    ),
    "type_choice_invalid": f"{EMOJI['warning']} Ответьте 1, 2 или 3 (расход, доход или подписка).",

    "remove_missing_name": f"{EMOJI['warning']} Что удалить? Например: «Удали подписку Netflix»",
    "not_found": f"{EMOJI['info']} Не нашёл «{{query}}» среди ваших {{kind_genitive}}.",
    "removed": f"{EMOJI['trash']} Удалено: {{name}}",
    "ask_removal_choice": "Нашлось несколько записей. Какую удалить? Ответьте номером или названием:\n\n{items}",
    "removal_choice_invalid": f"{EMOJI['warning']} Нет такого варианта. Ответьте номером или точным названием:\n\n{{items}}",

    "validation_failed": f"{EMOJI['error']} Запись не сохранена:\n{{errors}}",
    "storage_error": f"{EMOJI['error']} Не удалось выполнить операцию. Попробуйте ещё раз чуть позже.",
}

ADD_EXAMPLES = {
    "subscription": "Добавь Netflix 10000 вон 12 числа",
    "expense": "Расход 12000 вон кафе сегодня",
    "income": "Доход 3000000 вон зарплата",
}

ERROR_MESSAGES = {
    "transcription_failed": f"{EMOJI['error']} Не удалось распознать голосовое сообщение. Попробуйте ещё раз или напишите текстом.",
    "rate_limited": f"{EMOJI['warning']} Слишком много запросов. Подождите немного.",
    "unexpected": f"{EMOJI['error']} Что-то пошло не так. Попробуйте ещё раз.",
    "message_too_long": f"{EMOJI['warning']} Сообщение слишком длинное.",
}
