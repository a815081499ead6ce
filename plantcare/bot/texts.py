"""User-facing bot texts."""

START_TEXT = """
Привет! 🌱

Я помогу не забывать поливать комнатные растения.

Объедините растения в сценарии полива: укажите дату последнего полива и интервал, а я напомню, когда придёт время поливать.
""".strip()

MENU_TEXT = "Главное меню 🏠\n\nВыберите действие:"

HELP_TEXT = """
🌱 Помощник по поливу растений

/start - Начать работу и открыть главное меню
/menu - Открыть главное меню
/help - Показать эту справку

Как это работает:
1. Создайте сценарий полива: название, описание, дата последнего полива и интервал.
2. Добавьте в сценарий растения.
3. Когда наступит день полива, я пришлю напоминание со списком растений.
4. После полива нажмите кнопку под напоминанием, и я пересчитаю дату следующего полива.
""".strip()

# Buttons
CREATE_GROUP_BUTTON = "Добавить сценарий полива"
ADD_PLANT_BUTTON = "Добавить растение"
MANAGE_GROUPS_BUTTON = "Управление сценариями полива"
MANAGE_PLANTS_BUTTON = "Управление растениями"
BACK_BUTTON = "Назад ↩️"
MENU_BUTTON = "В меню 🏠"
CANCEL_BUTTON = "Отмена ❌"
SKIP_BUTTON = "Пропустить"
CONFIRM_BUTTON = "Подтвердить ✅"
ADD_PHOTO_BUTTON = "Добавить фото 📷"
WITHOUT_PHOTO_BUTTON = "Без фото"
CHANGE_BUTTON = "Изменить ✏️"
REMOVE_BUTTON = "Удалить 🗑"
CONFIRM_REMOVE_BUTTON = "Да, удалить 🗑"
SEE_PLANTS_BUTTON = "Растения сценария 🌿"
GROUP_WATERED_BUTTON = "Растения в данном сценарии политы ✅"

CHANGE_TITLE_BUTTON = "Название"
CHANGE_DESCRIPTION_BUTTON = "Описание"
CHANGE_LAST_WATERING_DATE_BUTTON = "Дата последнего полива"
CHANGE_WATERING_INTERVAL_BUTTON = "Интервал полива"
CHANGE_GROUP_BUTTON = "Сценарий полива"
CHANGE_PHOTO_BUTTON = "Фото"

# Group creation wizard
ADD_GROUP_TITLE = "Введите название сценария полива (не более {max_length} символов):"
ADD_GROUP_DESCRIPTION = "🪴 Сценарий: {title}\n\nВведите описание сценария полива или нажмите «Пропустить»:"
ADD_GROUP_LAST_WATERING_DATE = "{summary}\n\nВыберите дату последнего полива:"
ADD_GROUP_WATERING_INTERVAL = "{summary}\n\nВыберите, как часто нужно поливать растения:"
CONFIRM_ADD_GROUP = "{summary}\n\nВсё верно?"
GROUP_CREATED = "✅ Сценарий полива «{title}» создан!\n\nТеперь можно добавить в него растения."
GROUP_ALREADY_EXISTS = "❌ Сценарий полива с таким названием уже существует. Введите другое название:"
GROUP_TITLE_TOO_LONG = "❌ Название слишком длинное. Максимальная длина: {max_length} символов."
DESCRIPTION_TOO_LONG = "❌ Описание слишком длинное. Максимальная длина: {max_length} символов."
GROUPS_LIMIT_REACHED = "Достигнут лимит сценариев полива: {limit}"

# Plant creation wizard
ADD_PLANT_TITLE = "Введите название растения (не более {max_length} символов):"
ADD_PLANT_DESCRIPTION = "🌿 Растение: {title}\n\nВведите описание растения или нажмите «Пропустить»:"
ADD_PLANT_GROUP = "{summary}\n\nВыберите сценарий полива для растения:"
ADD_PLANT_PHOTO_QUESTION = "{summary}\n\nХотите добавить фото растения?"
ADD_PLANT_PHOTO = "Отправьте фото растения 📷"
CONFIRM_ADD_PLANT = "{summary}\n\nВсё верно?"
PLANT_CREATED = "✅ Растение «{title}» добавлено!"
PLANT_ALREADY_EXISTS = "Растение с таким названием уже есть в этом сценарии полива"
PLANT_TITLE_TOO_LONG = "❌ Название слишком длинное. Максимальная длина: {max_length} символов."
PLANTS_LIMIT_REACHED = "В этом сценарии полива достигнут лимит растений"

# Group management
CHOOSE_GROUP = "Выберите сценарий полива:"
GROUP_ACTIONS = "{card}\n\nВыберите действие:"
CHOOSE_GROUP_FIELD = "{card}\n\nЧто хотите изменить?"
CHANGE_GROUP_TITLE = "Введите новое название сценария полива (не более {max_length} символов):"
CHANGE_GROUP_DESCRIPTION = "Введите новое описание сценария полива:"
CHANGE_GROUP_LAST_WATERING_DATE = "Выберите новую дату последнего полива:"
CHANGE_GROUP_WATERING_INTERVAL = "Выберите новый интервал полива:"
CONFIRM_GROUP_REMOVAL = "Удалить сценарий полива «{title}» вместе со всеми его растениями?"
GROUP_REMOVED = "Сценарий полива «{title}» удалён"
GROUP_PLANTS = "🪴 Сценарий: {title}\n\n{plants}\nВыберите растение:"
GROUP_UPDATED = "Сценарий полива обновлён ✅"

# Plant management
CHOOSE_PLANTS_GROUP = "Выберите сценарий полива, растения которого хотите посмотреть:"
CHOOSE_PLANT = "🪴 Сценарий: {title}\n\nВыберите растение:"
PLANT_ACTIONS = "{card}\n\nВыберите действие:"
CHOOSE_PLANT_FIELD = "{card}\n\nЧто хотите изменить?"
CHANGE_PLANT_TITLE = "Введите новое название растения (не более {max_length} символов):"
CHANGE_PLANT_DESCRIPTION = "Введите новое описание растения:"
CHANGE_PLANT_GROUP = "Выберите новый сценарий полива для растения:"
CHANGE_PLANT_PHOTO = "Отправьте новое фото растения 📷"
CONFIRM_PLANT_REMOVAL = "Удалить растение «{title}»?"
PLANT_REMOVED = "Растение «{title}» удалено"
PLANT_UPDATED = "Растение обновлено ✅"
NO_OTHER_GROUPS = "Нет других сценариев полива для переноса растения"

# Notifications
GROUP_WATERED = "Отлично! Следующий полив: {next_date} 💧"

# Errors
NOT_AVAILABLE = "Эти данные больше недоступны"
NOT_REGISTERED = "Пожалуйста, нажмите /start, чтобы начать работу с ботом."
GENERIC_ERROR = "❌ Что-то пошло не так. Попробуйте ещё раз или вернитесь в меню командой /start."
