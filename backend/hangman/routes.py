from flask import Blueprint

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return 'Hangman server is running. Sessions ready.', 200, {'Content-Type': 'text/plain; charset=utf-8'}
