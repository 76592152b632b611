# app/cli.py
"""
Comandos administrativos: flask watermarks <comando>
"""
import click
from flask.cli import AppGroup

from app.errors import WatermarkError
from app.services.watermark_service import watermark_service
from app.utils.security import generate_api_token

watermarks_cli = AppGroup('watermarks', help="Administração das marcas d'água")


@watermarks_cli.command('token')
@click.argument('sender_id')
@click.option('--expires-in', type=int, default=None, help='Validade em segundos')
def token_command(sender_id, expires_in):
    """Gera um token de API para SENDER_ID"""
    click.echo(generate_api_token(sender_id, expires_in=expires_in))


@watermarks_cli.command('stats')
@click.option('--sender', 'sender_id', default=None, help='Filtrar por remetente')
def stats_command(sender_id):
    """Mostra estatísticas agregadas"""
    result = watermark_service.stats(sender_id=sender_id)
    click.echo(f"Total de marcas:      {result['total_watermarks']}")
    click.echo(f"Detectadas:           {result['detected_forwards']}")
    click.echo(f"Taxa de proteção:     {result['protection_rate']:.2f}%")
    for record in result['recent_detections']:
        click.echo(f"  {record.code}  {record.sender_id}  {record.detected_count}x  {record.last_detected_at}")


@watermarks_cli.command('check')
def check_command():
    """Lê um texto da entrada padrão e procura marca d'água"""
    text = click.get_text_stream('stdin').read()
    result = watermark_service.check_text(text)
    if not result.found:
        click.echo('Nenhuma marca d\'água encontrada')
        return
    record = result.record
    click.echo(f"Código:        {record.code}")
    click.echo(f"Remetente:     {record.sender_id}")
    click.echo(f"Destinatário:  {record.recipient_id or '-'}")
    click.echo(f"Plataforma:    {record.platform}")
    click.echo(f"Enviado em:    {record.created_at}")
    click.echo(f"Detecções:     {record.detected_count}")


@watermarks_cli.command('purge')
@click.argument('code')
def purge_command(code):
    """Remove o registro de CODE (o código continua reservado)"""
    try:
        watermark_service.purge(code)
    except WatermarkError as e:
        raise click.ClickException(e.message)
    click.echo(f"Marca d'água {code} removida")


def register_commands(app):
    app.cli.add_command(watermarks_cli)
