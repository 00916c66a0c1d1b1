from django.urls import path
from . import views

app_name = 'users'

urlpatterns = [
    # Authentication
    path('register/', views.register, name='register'),
    path('login/', views.login, name='login'),

    # User & bank profile
    path('user/', views.get_current_user, name='current-user'),
    path('bank-info/', views.update_bank_info, name='bank-info'),
    path('members/', views.list_members, name='members'),
]
