import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('catalog', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Event',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('type', models.CharField(choices=[('exhibition', 'Exhibition'), ('fair', 'Fair'), ('workshop', 'Workshop'), ('sale', 'Sale')], default='exhibition', max_length=20)),
                ('venue', models.CharField(blank=True, max_length=255, null=True)),
                ('start_date', models.DateTimeField()),
                ('end_date', models.DateTimeField(blank=True, null=True)),
                ('description', models.TextField(blank=True, null=True)),
                ('website', models.URLField(blank=True, max_length=500, null=True)),
                ('participation_fee', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('status', models.CharField(choices=[('planned', 'Planned'), ('confirmed', 'Confirmed'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], default='planned', max_length=20)),
                ('notes', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='events', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'events',
                'ordering': ['-start_date'],
                'indexes': [
                    models.Index(fields=['user', 'start_date'], name='idx_event_user_start'),
                    models.Index(fields=['user', 'status'], name='idx_event_user_status'),
                ],
            },
        ),
        migrations.CreateModel(
            name='EventPiece',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('display_price', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('sold', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('event', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='pieces', to='events.event')),
                ('piece', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='event_entries', to='catalog.piece')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='event_pieces', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'event_pieces',
                'ordering': ['created_at'],
                'constraints': [
                    models.UniqueConstraint(fields=('event', 'piece'), name='uniq_event_piece'),
                ],
            },
        ),
    ]
