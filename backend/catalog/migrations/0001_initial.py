import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('galleries', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='PieceType',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('description', models.TextField(blank=True, null=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='piece_types', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'piece_types',
                'ordering': ['name'],
                'constraints': [
                    models.UniqueConstraint(fields=('user', 'name'), name='uniq_piece_type_user_name'),
                ],
            },
        ),
        migrations.CreateModel(
            name='PieceSubtype',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('description', models.TextField(blank=True, null=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('piece_type', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='subtypes', to='catalog.piecetype')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='piece_subtypes', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'piece_subtypes',
                'ordering': ['name'],
                'constraints': [
                    models.UniqueConstraint(fields=('user', 'piece_type', 'name'), name='uniq_piece_subtype_user_type_name'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Piece',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('unique_id', models.CharField(max_length=100)),
                ('dimensions', models.CharField(blank=True, max_length=100, null=True)),
                ('dominant_color', models.CharField(blank=True, max_length=50, null=True)),
                ('description', models.TextField(blank=True, null=True)),
                ('status', models.CharField(choices=[('workshop', 'Workshop'), ('transit', 'In transit'), ('gallery', 'In gallery'), ('sold', 'Sold'), ('completed', 'Completed')], default='workshop', max_length=20)),
                ('current_location', models.CharField(default='atelier', max_length=100)),
                ('price', models.DecimalField(decimal_places=2, max_digits=10)),
                ('image_url', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('gallery', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='pieces', to='galleries.gallery')),
                ('piece_subtype', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='pieces', to='catalog.piecesubtype')),
                ('piece_type', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='pieces', to='catalog.piecetype')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='pieces', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'pieces',
                'ordering': ['-created_at'],
                'constraints': [
                    models.UniqueConstraint(fields=('user', 'unique_id'), name='uniq_piece_user_unique_id'),
                ],
                'indexes': [
                    models.Index(fields=['user', 'status'], name='idx_piece_user_status'),
                    models.Index(fields=['user', 'gallery'], name='idx_piece_user_gallery'),
                ],
            },
        ),
    ]
