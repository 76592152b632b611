from app import create_app, db
import os

app = create_app()


@app.shell_context_processor
def make_shell_context():
    # Importar models aqui para evitar importação circular
    from app.models import IssuedCode, MessageWatermark
    from app.services.watermark_service import watermark_service

    return {
        'db': db,
        'MessageWatermark': MessageWatermark,
        'IssuedCode': IssuedCode,
        'watermark_service': watermark_service,
    }


if __name__ == '__main__':
    with app.app_context():
        # Mostrar configuração do banco
        print(f"Banco de dados: {app.config['SQLALCHEMY_DATABASE_URI']}")

        # Criar tabelas
        db.create_all()
        print("Banco de dados criado/atualizado")

    debug = os.environ.get('FLASK_DEBUG', 'False').lower() in ['true', '1', 'on']
    port = int(os.environ.get('PORT', 5000))
    print(f"msgtrace rodando em http://localhost:{port} (debug={debug})")
    app.run(debug=debug, host='0.0.0.0', port=port)
