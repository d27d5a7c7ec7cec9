from pydantic import BaseModel


# Пустые значения проверяются в сервисе, чтобы вернуть 400, а не 422
class RegisterRequest(BaseModel):
    first_name: str = ""
    last_name: str = ""
    email_id: str = ""
    password: str = ""


class LoginRequest(BaseModel):
    email_id: str = ""
    password: str = ""
